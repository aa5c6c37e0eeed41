"""
Sample data: an employee satisfaction survey and three workflow documents
(one in review, one draft, one approved).

Used by the CLI `sample` command and by tests.
"""
from typing import List

from surveyflow.model import (
    DocumentStatus,
    Question,
    Section,
    StepStatus,
    Survey,
    SurveyMetadata,
    Validation,
    WorkflowDocument,
    WorkflowStep,
)

SATISFACTION_SCALE = ["Very satisfied", "Satisfied", "Neutral", "Dissatisfied", "Very dissatisfied"]


def build_sample_survey() -> Survey:
    survey = Survey(
        id="employee-satisfaction-2024",
        title="Employee Satisfaction Survey 2024",
        description="A survey about the workplace and job satisfaction. Please answer candidly.",
        metadata=SurveyMetadata(created="2024-01-15", version="1.0", author="HR"),
    )

    basic = Section(
        id="basic-info",
        title="Basic information",
        description="First, some basic information.",
        questions=[
            Question(
                id="department",
                type="select",
                label="Department",
                required=True,
                options=["Sales", "Engineering", "HR", "Finance", "Other"],
            ),
            Question(
                id="years",
                type="number",
                label="Years of service",
                required=True,
                placeholder="Enter a number of years",
                validation=Validation(min=0, max=50),
            ),
        ],
    )

    environment = Section(
        id="work-environment",
        title="Work environment",
        description="Rate your work environment.",
        questions=[
            Question(
                id="workplace-satisfaction",
                type="radio",
                label="Satisfaction with the workplace",
                required=True,
                options=list(SATISFACTION_SCALE),
            ),
            Question(
                id="work-life-balance",
                type="radio",
                label="Satisfaction with work-life balance",
                required=True,
                options=list(SATISFACTION_SCALE),
            ),
            Question(
                id="improvements",
                type="textarea",
                label="What could be improved?",
                placeholder="Concrete suggestions are welcome",
            ),
        ],
    )

    job = Section(
        id="job-satisfaction",
        title="Job satisfaction",
        description="Rate your current job.",
        questions=[
            Question(
                id="job-interest",
                type="radio",
                label="Interest in your work",
                required=True,
                options=["Very high", "High", "Average", "Low", "Very low"],
            ),
            Question(
                id="future-plans",
                type="select",
                label="Career plans",
                options=["Stay in current role", "Transfer", "Change jobs", "Start a business", "Undecided"],
            ),
        ],
    )

    survey.sections = [basic, environment, job]
    return survey


def build_sample_documents() -> List[WorkflowDocument]:
    in_review = WorkflowDocument(
        id="doc-001",
        title="New product development plan",
        content="## Summary\n- Product: Smartwatch Pro\n- Budget: 50M JPY\n- Schedule: 12 months",
        status=DocumentStatus.REVIEW,
        current_step=2,
        created_at="2024-01-15T10:00:00Z",
        updated_at="2024-01-20T14:30:00Z",
        steps=[
            WorkflowStep(
                id="step-1",
                name="Planning review",
                assignee="Tanaka",
                status=StepStatus.COMPLETED,
                completed_at="2024-01-18T16:00:00Z",
                comments=["Good proposal from a market perspective.", "Budget needs more detail."],
            ),
            WorkflowStep(id="step-2", name="Engineering check", assignee="Sato", status=StepStatus.IN_PROGRESS),
            WorkflowStep(id="step-3", name="Executive approval", assignee="Yamada"),
        ],
    )

    draft = WorkflowDocument(
        id="doc-002",
        title="HR policy revision",
        content="## Changes\n- Wider flextime\n- Remote work policy\n- More parental leave",
        status=DocumentStatus.DRAFT,
        current_step=1,
        created_at="2024-01-10T09:00:00Z",
        updated_at="2024-01-10T09:00:00Z",
        steps=[
            WorkflowStep(id="step-1", name="Legal check", assignee="Takahashi", status=StepStatus.IN_PROGRESS),
            WorkflowStep(id="step-2", name="CEO approval", assignee="Ito"),
        ],
    )

    approved = WorkflowDocument(
        id="doc-003",
        title="System upgrade plan",
        content="## Scope\n- Security patches\n- New features\n- Performance work",
        status=DocumentStatus.APPROVED,
        current_step=3,
        created_at="2024-01-05T14:00:00Z",
        updated_at="2024-01-25T10:00:00Z",
        steps=[
            WorkflowStep(
                id="step-1",
                name="IT review",
                assignee="Tamura",
                status=StepStatus.COMPLETED,
                completed_at="2024-01-12T15:00:00Z",
                comments=["Technically feasible."],
            ),
            WorkflowStep(
                id="step-2",
                name="Budget approval",
                assignee="Finance",
                status=StepStatus.COMPLETED,
                completed_at="2024-01-20T11:00:00Z",
            ),
            WorkflowStep(
                id="step-3",
                name="Final approval",
                assignee="CTO",
                status=StepStatus.COMPLETED,
                completed_at="2024-01-25T10:00:00Z",
                comments=["Approved. Please proceed."],
            ),
        ],
    )

    return [in_review, draft, approved]
