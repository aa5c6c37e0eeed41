"""
Core Survey and Workflow Model Objects

Defines the fundamental data structures of SurveyFlow.

These are pure data classes representing:
    - Surveys (root container), Sections, Questions, Validation bounds
    - Survey responses (what a respondent submitted)
    - Workflow documents and their approval steps

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about XML, forms or storage
        - Are mutated only by the codec, the workflow state machine,
          or direct field replacement by an editor
        - Are fully serializable
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional, Union


Number = Union[int, float]

TEXT = "text"
NUMBER = "number"
SELECT = "select"
RADIO = "radio"
CHECKBOX = "checkbox"
TEXTAREA = "textarea"
DATE = "date"

QUESTION_TYPES = (TEXT, NUMBER, SELECT, RADIO, CHECKBOX, TEXTAREA, DATE)

# Question types whose answers must come from Question.options
CHOICE_TYPES = (SELECT, RADIO, CHECKBOX)


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Validation:
    """
    Input bounds for a single question.

    Properties:
        min: Lower bound on a numeric answer
        max: Upper bound on a numeric answer
        pattern: Regular expression the answer must match

    NOTE:
        pattern lives in the model and is enforced by the form layer,
        but it is not part of the XML form of a survey.
    """

    min: Optional[Number] = None
    max: Optional[Number] = None
    pattern: Optional[str] = None


@dataclass
class Question:
    """
    A single input definition.

    Properties:
        id:
            Identifier, unique within its section
            Examples: "department", "years"

        type:
            One of QUESTION_TYPES. Kept as a plain string so that a document
            carrying an unknown type still decodes; the validation pass flags it.

        label:
            Human-readable question text

        required:
            Whether an answer must be supplied

        options:
            Ordered choices, meaningful only for CHOICE_TYPES

        placeholder:
            Hint text shown in an empty input ("" when absent)

        validation:
            Optional Validation bounds
    """

    id: str
    type: str = TEXT
    label: str = ""
    required: bool = False
    options: List[str] = field(default_factory=list)
    placeholder: str = ""
    validation: Optional[Validation] = None

    @property
    def is_choice(self) -> bool:
        return self.type in CHOICE_TYPES


@dataclass
class Section:
    """
    A titled grouping of questions within a survey.

    A Section exclusively owns its questions.
    """

    id: str
    title: str = ""
    description: str = ""
    questions: List[Question] = field(default_factory=list)

    def get_question(self, question_id: str) -> Optional[Question]:
        """
        Retrieve a question by ID.

        Returns:
            Question object or None if not found
        """
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


@dataclass
class SurveyMetadata:
    """
    Authoring metadata for a survey.

    Every field is a string; an absent field is the empty string.
    Example: created="2024-01-15", version="1.0", author="HR"
    """

    created: str = ""
    version: str = ""
    author: str = ""


@dataclass
class Survey:
    """
    Root container for a survey definition.

    This is THE primary artifact of the authoring side.

    Everything else (XML text, rendered forms, responses) is derived
    from or validated against this object.

    Properties:
        id:
            Unique key among persisted surveys
            Example: "employee-satisfaction-2024"

        title:
            Display title

        description:
            Introductory text ("" when absent)

        metadata:
            Optional SurveyMetadata. None means "no metadata block",
            which is different from a block with empty fields.

        sections:
            Ordered sections

    INVARIANTS:
        - id is non-empty and unique among persisted surveys
        - A usable survey has at least one section
        These are checked by surveyflow.validation, never at construction.
    """

    id: str
    title: str = ""
    description: str = ""
    metadata: Optional[SurveyMetadata] = None
    sections: List[Section] = field(default_factory=list)

    def get_section(self, section_id: str) -> Optional[Section]:
        """
        Retrieve a section by ID.

        Returns:
            Section object or None if not found
        """
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def get_question(self, question_id: str) -> Optional[Question]:
        """
        Retrieve the first question with this ID in any section.

        Returns:
            Question object or None if not found
        """
        for section in self.sections:
            question = section.get_question(question_id)
            if question is not None:
                return question
        return None

    def iter_questions(self):
        """Yield (section, question) pairs in document order."""
        for section in self.sections:
            for question in section.questions:
                yield section, question


@dataclass
class ResponseItem:
    """One answered question inside a SurveyResponse."""

    question_id: str
    question_label: str
    value: Any = None


@dataclass
class SurveyResponse:
    """
    The answers one respondent submitted for one survey.

    value entries are JSON-compatible: strings, numbers, or a list of
    strings for checkbox questions.
    """

    survey_id: str
    responses: List[ResponseItem] = field(default_factory=list)
    submitted_at: str = ""
    user_id: Optional[str] = None


class DocumentStatus(str, Enum):
    """Status of a workflow document. APPROVED and REJECTED are terminal."""
    DRAFT = "draft"
    REVIEW = "review"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (DocumentStatus.APPROVED, DocumentStatus.REJECTED)


class StepStatus(str, Enum):
    """Status of a single approval step."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (StepStatus.COMPLETED, StepStatus.REJECTED)


@dataclass
class WorkflowStep:
    """
    One stage of an approval chain.

    Example: "Legal review" assigned to "Takahashi", status in-progress.

    Properties:
        id: Step identifier, unique within its document
        name: Display name
        assignee: Who acts on this step
        status: StepStatus
        comments: Ordered free-text comments
        completed_at: ISO timestamp set when the step is approved
    """

    id: str
    name: str
    assignee: str = ""
    status: StepStatus = StepStatus.PENDING
    comments: List[str] = field(default_factory=list)
    completed_at: Optional[str] = None


@dataclass
class WorkflowDocument:
    """
    A piece of content routed through an ordered sequence of approval steps.

    Properties:
        id:
            Document identifier ("doc-..." for created documents)

        title, content:
            Display title and lightly marked-up body text

        status:
            DocumentStatus of the whole document

        current_step:
            1-based index of the active step. After the last step is
            approved it keeps pointing at that last step's number.

        steps:
            Ordered WorkflowStep values

        created_at, updated_at:
            ISO-8601 UTC timestamps

    INVARIANT (unless the document is terminal):
        steps[:current_step - 1]   are completed
        steps[current_step - 1]    is in-progress
        steps[current_step:]       are pending
    Checked by surveyflow.validation.check_workflow_invariants.
    """

    id: str
    title: str
    content: str = ""
    status: DocumentStatus = DocumentStatus.DRAFT
    current_step: int = 1
    steps: List[WorkflowStep] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def get_step(self, step_index: int) -> Optional[WorkflowStep]:
        """
        Retrieve a step by 0-based index.

        Returns:
            WorkflowStep or None if the index is out of range (negative included)
        """
        if 0 <= step_index < len(self.steps):
            return self.steps[step_index]
        return None
