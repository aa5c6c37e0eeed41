"""Shared fixtures for SurveyFlow tests."""

import itertools

import pytest

from surveyflow.examples import build_sample_survey
from surveyflow.model import (
    DocumentStatus,
    StepStatus,
    WorkflowDocument,
    WorkflowStep,
)
from surveyflow.store import InMemoryStore


class FakeClock:
    """Returns increasing, predictable timestamps."""

    def __init__(self):
        self._counter = itertools.count(1)
        self.last = None

    def __call__(self):
        self.last = f"2024-02-01T00:00:{next(self._counter):02d}.000Z"
        return self.last


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def sample_survey():
    return build_sample_survey()


@pytest.fixture
def three_step_document():
    """A review document at step 1 of 3."""
    return WorkflowDocument(
        id="doc-test",
        title="Budget proposal",
        content="Numbers",
        status=DocumentStatus.REVIEW,
        current_step=1,
        created_at="2024-01-01T00:00:00.000Z",
        updated_at="2024-01-01T00:00:00.000Z",
        steps=[
            WorkflowStep(id="s1", name="Draft check", assignee="A", status=StepStatus.IN_PROGRESS),
            WorkflowStep(id="s2", name="Review", assignee="B"),
            WorkflowStep(id="s3", name="Approval", assignee="C"),
        ],
    )
