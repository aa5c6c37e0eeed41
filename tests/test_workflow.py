"""
Tests for the workflow state machine.

These tests verify:
    - Approval advances exactly one step at a time, and only from the current step
    - Approving the last step approves the document
    - Rejection is sticky and terminal
    - Missing documents / steps yield None
    - Terminal documents refuse further transitions
"""

import pytest

from surveyflow.errors import WorkflowTransitionError
from surveyflow.model import DocumentStatus, StepStatus, WorkflowStep
from surveyflow.validation import check_workflow_invariants
from surveyflow.workflow import (
    add_comment,
    approve_step,
    create_document,
    current_step_of,
    find_document,
    progress,
    reject_step,
    update_document,
)


class TestApproveStep:
    def test_full_approval_scenario(self, three_step_document, clock):
        doc = three_step_document

        approve_step(doc, 0, clock=clock)
        assert doc.current_step == 2
        assert doc.steps[0].status == StepStatus.COMPLETED
        assert doc.steps[1].status == StepStatus.IN_PROGRESS
        assert doc.status == DocumentStatus.REVIEW

        approve_step(doc, 1, clock=clock)
        assert doc.current_step == 3
        assert doc.steps[2].status == StepStatus.IN_PROGRESS

        approve_step(doc, 2, clock=clock)
        assert doc.status == DocumentStatus.APPROVED
        assert doc.current_step == 3
        assert all(step.status == StepStatus.COMPLETED for step in doc.steps)
        assert check_workflow_invariants(doc) == []

    def test_advances_by_exactly_one(self, three_step_document, clock):
        doc = three_step_document
        before = doc.current_step
        approve_step(doc, before - 1, clock=clock)
        assert doc.current_step == before + 1
        assert doc.steps[before].status == StepStatus.IN_PROGRESS
        assert check_workflow_invariants(doc) == []

    def test_stamps_completed_at_and_updated_at(self, three_step_document, clock):
        doc = approve_step(three_step_document, 0, clock=clock)
        assert doc.steps[0].completed_at == clock.last
        assert doc.updated_at == clock.last
        assert doc.steps[1].completed_at is None

    def test_returns_same_document(self, three_step_document, clock):
        assert approve_step(three_step_document, 0, clock=clock) is three_step_document

    def test_missing_document(self, clock):
        assert approve_step(None, 0, clock=clock) is None

    @pytest.mark.parametrize("index", [3, 10, -1])
    def test_missing_step(self, three_step_document, clock, index):
        assert approve_step(three_step_document, index, clock=clock) is None
        assert three_step_document.current_step == 1
        assert three_step_document.updated_at == "2024-01-01T00:00:00.000Z"

    def test_out_of_turn_approval_refused(self, three_step_document, clock):
        doc = three_step_document
        with pytest.raises(WorkflowTransitionError):
            approve_step(doc, 1, clock=clock)
        assert [s.status for s in doc.steps] == [
            StepStatus.IN_PROGRESS,
            StepStatus.PENDING,
            StepStatus.PENDING,
        ]
        assert doc.current_step == 1
        assert doc.updated_at == "2024-01-01T00:00:00.000Z"
        assert check_workflow_invariants(doc) == []

    def test_last_step_cannot_be_approved_early(self, three_step_document, clock):
        doc = three_step_document
        with pytest.raises(WorkflowTransitionError):
            approve_step(doc, 2, clock=clock)
        assert doc.status == DocumentStatus.REVIEW
        assert doc.steps[2].status == StepStatus.PENDING

    def test_completed_step_cannot_be_approved_again(self, three_step_document, clock):
        doc = three_step_document
        approve_step(doc, 0, clock=clock)
        approve_step(doc, 1, clock=clock)
        with pytest.raises(WorkflowTransitionError):
            approve_step(doc, 0, clock=clock)
        assert doc.current_step == 3
        assert [s.status for s in doc.steps] == [
            StepStatus.COMPLETED,
            StepStatus.COMPLETED,
            StepStatus.IN_PROGRESS,
        ]
        assert check_workflow_invariants(doc) == []

    def test_refused_on_approved_document(self, three_step_document, clock):
        doc = three_step_document
        for i in range(3):
            approve_step(doc, i, clock=clock)
        stamp = doc.updated_at
        with pytest.raises(WorkflowTransitionError):
            approve_step(doc, 2, clock=clock)
        assert doc.updated_at == stamp

    def test_refused_on_rejected_document(self, three_step_document, clock):
        doc = reject_step(three_step_document, 0, clock=clock)
        with pytest.raises(WorkflowTransitionError):
            approve_step(doc, 0, clock=clock)
        assert doc.steps[0].status == StepStatus.REJECTED
        assert doc.current_step == 1


class TestRejectStep:
    def test_reject_is_sticky(self, three_step_document, clock):
        doc = three_step_document
        approve_step(doc, 0, clock=clock)
        reject_step(doc, 1, clock=clock)
        assert doc.status == DocumentStatus.REJECTED
        assert doc.steps[1].status == StepStatus.REJECTED
        assert doc.current_step == 2
        assert doc.updated_at == clock.last

    def test_reject_any_step(self, three_step_document, clock):
        doc = reject_step(three_step_document, 2, clock=clock)
        assert doc.status == DocumentStatus.REJECTED
        assert doc.steps[2].status == StepStatus.REJECTED
        assert doc.current_step == 1
        assert check_workflow_invariants(doc) == []

    def test_missing(self, three_step_document, clock):
        assert reject_step(None, 0, clock=clock) is None
        assert reject_step(three_step_document, 5, clock=clock) is None
        assert three_step_document.status == DocumentStatus.REVIEW

    def test_refused_twice(self, three_step_document, clock):
        reject_step(three_step_document, 0, clock=clock)
        with pytest.raises(WorkflowTransitionError):
            reject_step(three_step_document, 1, clock=clock)
        assert three_step_document.steps[1].status == StepStatus.PENDING


class TestAddComment:
    def test_appends(self, three_step_document, clock):
        doc = add_comment(three_step_document, 0, "Looks fine", clock=clock)
        add_comment(doc, 0, "One more thing", clock=clock)
        assert doc.steps[0].comments == ["Looks fine", "One more thing"]
        assert doc.updated_at == clock.last

    def test_allowed_on_terminal_document(self, three_step_document, clock):
        reject_step(three_step_document, 0, clock=clock)
        doc = add_comment(three_step_document, 0, "Reason: budget", clock=clock)
        assert doc.steps[0].comments == ["Reason: budget"]

    def test_missing(self, three_step_document, clock):
        assert add_comment(None, 0, "x", clock=clock) is None
        assert add_comment(three_step_document, 3, "x", clock=clock) is None


class TestCreateDocument:
    def test_fresh_document(self, clock):
        doc = create_document(
            "Plan",
            "Body",
            [WorkflowStep(id="a", name="A"), WorkflowStep(id="b", name="B")],
            clock=clock,
        )
        assert doc.id.startswith("doc-")
        assert doc.current_step == 1
        assert doc.status == DocumentStatus.DRAFT
        assert doc.created_at == doc.updated_at == clock.last
        assert doc.steps[0].status == StepStatus.IN_PROGRESS
        assert doc.steps[1].status == StepStatus.PENDING
        assert check_workflow_invariants(doc) == []

    def test_ids_are_unique(self, clock):
        ids = {create_document("x", clock=clock).id for _ in range(50)}
        assert len(ids) == 50

    def test_supplied_steps_are_copied(self, clock):
        steps = [WorkflowStep(id="a", name="A")]
        doc = create_document("x", steps=steps, clock=clock)
        assert steps[0].status == StepStatus.PENDING
        assert doc.steps[0] is not steps[0]

    def test_non_pending_first_step_is_trusted(self, clock):
        doc = create_document(
            "x",
            steps=[WorkflowStep(id="a", name="A", status=StepStatus.COMPLETED)],
            clock=clock,
        )
        assert doc.steps[0].status == StepStatus.COMPLETED

    def test_status_from_string(self, clock):
        assert create_document("x", status="review", clock=clock).status == DocumentStatus.REVIEW

    def test_no_steps(self, clock):
        doc = create_document("x", clock=clock)
        assert doc.steps == []
        assert current_step_of(doc) is None


class TestHelpers:
    def test_find_document(self, three_step_document):
        assert find_document([three_step_document], "doc-test") is three_step_document
        assert find_document([three_step_document], "nope") is None

    def test_update_document(self, three_step_document, clock):
        docs = [three_step_document]
        doc = update_document(docs, "doc-test", clock=clock, title="New title", id="hijack")
        assert doc.title == "New title"
        assert doc.id == "doc-test"
        assert doc.updated_at == clock.last

    def test_update_unknown_field(self, three_step_document, clock):
        with pytest.raises(AttributeError):
            update_document([three_step_document], "doc-test", clock=clock, colour="red")

    def test_update_missing(self, clock):
        assert update_document([], "doc-test", clock=clock, title="x") is None

    def test_current_step_and_progress(self, three_step_document, clock):
        assert current_step_of(three_step_document).id == "s1"
        assert progress(three_step_document) == (0, 3)
        approve_step(three_step_document, 0, clock=clock)
        assert current_step_of(three_step_document).id == "s2"
        assert progress(three_step_document) == (1, 3)
