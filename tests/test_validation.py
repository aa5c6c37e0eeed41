"""Tests for the survey validation pass and workflow invariant checks."""

import pytest

from surveyflow.examples import build_sample_documents
from surveyflow.model import (
    DocumentStatus,
    Question,
    Section,
    StepStatus,
    Survey,
    Validation,
    WorkflowDocument,
    WorkflowStep,
)
from surveyflow.validation import check_workflow_invariants, validate_survey


def _survey_with(*questions):
    return Survey(id="s", title="T", sections=[Section(id="sec", title="Sec", questions=list(questions))])


class TestValidateSurvey:
    def test_sample_survey_is_valid(self, sample_survey):
        result = validate_survey(sample_survey)
        assert result.is_valid
        assert result.errors == []

    def test_empty_survey(self):
        result = validate_survey(Survey(id=" "))
        assert not result.is_valid
        assert result.errors == [
            "Survey id is required",
            "Title is required",
            "At least one section is required",
        ]

    def test_section_problems(self):
        survey = Survey(id="s", title="T", sections=[Section(id="", title="")])
        errors = validate_survey(survey).errors
        assert "Section 1: id is required" in errors
        assert "Section 1: title is required" in errors
        assert "Section 1: at least one question is required" in errors

    def test_duplicate_section_ids(self):
        q = Question(id="q", label="L")
        survey = Survey(id="s", title="T", sections=[
            Section(id="a", title="A", questions=[q]),
            Section(id="a", title="B", questions=[q]),
        ])
        assert "Section 2: duplicate section id 'a'" in validate_survey(survey).errors

    def test_duplicate_question_ids(self):
        survey = _survey_with(Question(id="q", label="One"), Question(id="q", label="Two"))
        assert "Section 1 question 2: duplicate question id 'q'" in validate_survey(survey).errors

    def test_question_requires_id_and_label(self):
        errors = validate_survey(_survey_with(Question(id="", label=""))).errors
        assert "Section 1 question 1: id is required" in errors
        assert "Section 1 question 1: label is required" in errors

    @pytest.mark.parametrize("qtype", ["select", "radio", "checkbox"])
    def test_choice_question_needs_options(self, qtype):
        errors = validate_survey(_survey_with(Question(id="q", type=qtype, label="L"))).errors
        assert errors == [f"Section 1 question 1: options are required for {qtype} questions"]

    def test_unknown_type(self):
        errors = validate_survey(_survey_with(Question(id="q", type="slider", label="L"))).errors
        assert errors == ["Section 1 question 1: unknown question type 'slider'"]

    def test_inverted_bounds(self):
        question = Question(id="q", type="number", label="L", validation=Validation(min=10, max=1))
        errors = validate_survey(_survey_with(question)).errors
        assert errors == ["Section 1 question 1: validation min (10) is greater than max (1)"]

    def test_bad_pattern(self):
        question = Question(id="q", label="L", validation=Validation(pattern="([a-z"))
        errors = validate_survey(_survey_with(question)).errors
        assert len(errors) == 1
        assert "invalid validation pattern" in errors[0]

    def test_errors_are_not_repeated(self):
        result = validate_survey(Survey(id=""))
        result.add_error("Survey id is required")
        assert result.errors.count("Survey id is required") == 1


class TestWorkflowInvariants:
    def test_sample_documents_hold(self):
        for doc in build_sample_documents():
            assert check_workflow_invariants(doc) == [], doc.id

    def test_no_steps(self):
        assert check_workflow_invariants(WorkflowDocument(id="d", title="t")) == []

    def test_current_step_out_of_range(self):
        doc = WorkflowDocument(id="d", title="t", current_step=4, steps=[WorkflowStep(id="a", name="A")])
        assert check_workflow_invariants(doc) == ["current_step 4 is outside 1..1"]

    def test_wrong_statuses(self):
        doc = WorkflowDocument(
            id="d",
            title="t",
            current_step=2,
            steps=[
                WorkflowStep(id="a", name="A", status=StepStatus.IN_PROGRESS),
                WorkflowStep(id="b", name="B", status=StepStatus.IN_PROGRESS),
                WorkflowStep(id="c", name="C", status=StepStatus.IN_PROGRESS),
            ],
        )
        assert check_workflow_invariants(doc) == [
            "step 1 (a) is in-progress, expected completed",
            "step 3 (c) is in-progress, expected pending",
        ]

    def test_approved_with_open_step(self):
        doc = WorkflowDocument(
            id="d",
            title="t",
            status=DocumentStatus.APPROVED,
            steps=[WorkflowStep(id="a", name="A", status=StepStatus.IN_PROGRESS)],
        )
        assert check_workflow_invariants(doc) == ["step 1 (a) is in-progress in an approved document"]

    def test_rejected_without_rejected_step(self):
        doc = WorkflowDocument(
            id="d",
            title="t",
            status=DocumentStatus.REJECTED,
            steps=[WorkflowStep(id="a", name="A", status=StepStatus.IN_PROGRESS)],
        )
        assert check_workflow_invariants(doc) == ["document is rejected but no step is rejected"]
