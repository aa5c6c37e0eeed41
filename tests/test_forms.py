"""Tests for the form-binding contract (field enumeration, answer checks, responses)."""

import pytest

from surveyflow.forms import FormField, build_response, iter_fields, validate_answers
from surveyflow.model import Question, Section, Survey, Validation


VALID_ANSWERS = {
    "department": "Engineering",
    "years": "7",
    "workplace-satisfaction": "Satisfied",
    "work-life-balance": "Neutral",
    "job-interest": "High",
}


@pytest.fixture
def mixed_survey():
    return Survey(id="mixed", title="Mixed", sections=[Section(id="main", title="Main", questions=[
        Question(id="tools", type="checkbox", label="Tools", options=["Editor", "Terminal", "Browser"]),
        Question(id="born", type="date", label="Birthday"),
        Question(id="code", type="text", label="Code", validation=Validation(pattern=r"[A-Z]{3}")),
        Question(id="score", type="number", label="Score", validation=Validation(min=1, max=5)),
    ])])


class TestIterFields:
    def test_document_order_and_keys(self, sample_survey):
        fields = list(iter_fields(sample_survey))
        assert len(fields) == 7
        assert fields[0].key == ("basic-info", "department")
        assert fields[-1].key == ("job-satisfaction", "future-plans")

    def test_field_contents(self, sample_survey):
        years = next(f for f in iter_fields(sample_survey) if f.question_id == "years")
        assert years == FormField(
            section_id="basic-info",
            question_id="years",
            type="number",
            label="Years of service",
            required=True,
            options=(),
            placeholder="Enter a number of years",
        )
        assert years.validation == Validation(min=0, max=50)

    def test_options_are_tuples(self, sample_survey):
        department = next(iter_fields(sample_survey))
        assert department.options == ("Sales", "Engineering", "HR", "Finance", "Other")


class TestValidateAnswers:
    def test_valid(self, sample_survey):
        assert validate_answers(sample_survey, VALID_ANSWERS) == []

    def test_missing_required(self, sample_survey):
        answers = dict(VALID_ANSWERS, department="  ")
        del answers["job-interest"]
        assert validate_answers(sample_survey, answers) == [
            "Department: an answer is required",
            "Interest in your work: an answer is required",
        ]

    def test_option_membership(self, sample_survey):
        errors = validate_answers(sample_survey, dict(VALID_ANSWERS, department="Marketing"))
        assert errors == ["Department: 'Marketing' is not one of the options"]

    def test_number_bounds(self, sample_survey):
        assert validate_answers(sample_survey, dict(VALID_ANSWERS, years=51)) == [
            "Years of service: must be at most 50"
        ]
        assert validate_answers(sample_survey, dict(VALID_ANSWERS, years="-1")) == [
            "Years of service: must be at least 0"
        ]

    def test_not_a_number(self, sample_survey):
        assert validate_answers(sample_survey, dict(VALID_ANSWERS, years="many")) == [
            "Years of service: 'many' is not a number"
        ]

    def test_optional_questions_may_be_empty(self, mixed_survey):
        assert validate_answers(mixed_survey, {}) == []

    def test_checkbox(self, mixed_survey):
        assert validate_answers(mixed_survey, {"tools": ["Editor", "Browser"]}) == []
        assert validate_answers(mixed_survey, {"tools": ["Editor", "Fax"]}) == [
            "Tools: Fax is not one of the options"
        ]

    def test_date(self, mixed_survey):
        assert validate_answers(mixed_survey, {"born": "1990-04-01"}) == []
        assert validate_answers(mixed_survey, {"born": "01/04/1990"}) == [
            "Birthday: '01/04/1990' is not a date (YYYY-MM-DD)"
        ]

    def test_pattern_is_full_match(self, mixed_survey):
        assert validate_answers(mixed_survey, {"code": "ABC"}) == []
        assert validate_answers(mixed_survey, {"code": "ABCD"}) == [
            "Code: does not match the required format"
        ]

    def test_broken_pattern_is_reported_not_raised(self):
        survey = Survey(id="s", title="S", sections=[Section(id="main", title="Main", questions=[
            Question(id="q", type="text", label="Reference", validation=Validation(pattern="(")),
        ])])
        assert validate_answers(survey, {"q": "x"}) == [
            "Reference: cannot be checked, the format rule '(' is invalid"
        ]

    def test_unknown_answers_are_ignored(self, mixed_survey):
        assert validate_answers(mixed_survey, {"nope": "x"}) == []


class TestBuildResponse:
    def test_items_follow_document_order(self, sample_survey, clock):
        answers = dict(VALID_ANSWERS, improvements="More plants")
        response = build_response(sample_survey, answers, user_id="u-7", clock=clock)
        assert response.survey_id == "employee-satisfaction-2024"
        assert response.user_id == "u-7"
        assert response.submitted_at == clock.last
        assert [item.question_id for item in response.responses] == [
            "department",
            "years",
            "workplace-satisfaction",
            "work-life-balance",
            "improvements",
            "job-interest",
        ]
        assert response.responses[0].question_label == "Department"

    def test_unanswered_are_left_out(self, mixed_survey, clock):
        response = build_response(mixed_survey, {"tools": ("Editor",), "code": "", "score": 3}, clock=clock)
        assert [(i.question_id, i.value) for i in response.responses] == [("tools", ["Editor"]), ("score", 3)]
