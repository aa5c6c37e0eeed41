"""
Form-binding contract: what a UI layer needs to build inputs from a Survey
and turn submitted values into a SurveyResponse.

The UI itself is out of scope. This module only:
    - enumerates fields in document order       (iter_fields)
    - checks submitted answers                  (validate_answers)
    - builds the response record                (build_response)

Answers are a flat mapping keyed by question id. Checkbox answers are
lists of the selected options; everything else is a scalar.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterator, List, Mapping, Optional, Tuple

from surveyflow.model import (
    CHECKBOX,
    DATE,
    NUMBER,
    Question,
    ResponseItem,
    Survey,
    SurveyResponse,
    Validation,
    utc_timestamp,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormField:
    """Everything needed to render and check one input control."""

    section_id: str
    question_id: str
    type: str
    label: str
    required: bool
    options: Tuple[str, ...] = ()
    placeholder: str = ""
    validation: Optional[Validation] = field(default=None, compare=False)

    @property
    def key(self) -> Tuple[str, str]:
        return self.section_id, self.question_id


def iter_fields(survey: Survey) -> Iterator[FormField]:
    """Yield one FormField per question, in section then question order."""
    for section, question in survey.iter_questions():
        yield FormField(
            section_id=section.id,
            question_id=question.id,
            type=question.type,
            label=question.label,
            required=question.required,
            options=tuple(question.options),
            placeholder=question.placeholder,
            validation=question.validation,
        )


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def _check_answer(question: Question, value: Any) -> List[str]:
    label = question.label or question.id
    errors: List[str] = []

    if question.type == CHECKBOX:
        selected = list(value) if isinstance(value, (list, tuple, set)) else [value]
        unknown = [v for v in selected if v not in question.options]
        if unknown:
            errors.append(f"{label}: {', '.join(map(str, unknown))} is not one of the options")
        return errors

    if question.is_choice and value not in question.options:
        errors.append(f"{label}: '{value}' is not one of the options")

    number = _as_number(value)
    if question.type == NUMBER and number is None:
        errors.append(f"{label}: '{value}' is not a number")

    if question.type == DATE:
        try:
            date.fromisoformat(str(value))
        except ValueError:
            errors.append(f"{label}: '{value}' is not a date (YYYY-MM-DD)")

    rules = question.validation
    if rules is None:
        return errors

    # min/max only constrain values that read as numbers
    if number is not None:
        if rules.min is not None and number < rules.min:
            errors.append(f"{label}: must be at least {rules.min}")
        if rules.max is not None and number > rules.max:
            errors.append(f"{label}: must be at most {rules.max}")

    if rules.pattern:
        try:
            matched = re.fullmatch(rules.pattern, str(value))
        except re.error as exc:
            logger.warning("Question %r has an unusable pattern %r: %s", question.id, rules.pattern, exc)
            errors.append(f"{label}: cannot be checked, the format rule '{rules.pattern}' is invalid")
        else:
            if matched is None:
                errors.append(f"{label}: does not match the required format")

    return errors


def validate_answers(survey: Survey, answers: Mapping[str, Any]) -> List[str]:
    """
    Check submitted answers against the survey's questions.

    Args:
        survey: Survey the answers belong to
        answers: question id -> submitted value

    Returns:
        Human-readable problems; empty when the answers are acceptable
    """
    errors: List[str] = []
    for _, question in survey.iter_questions():
        value = answers.get(question.id)
        if _is_empty(value):
            if question.required:
                errors.append(f"{question.label or question.id}: an answer is required")
            continue
        errors.extend(_check_answer(question, value))

    unknown = sorted(set(answers) - {q.id for _, q in survey.iter_questions()})
    if unknown:
        logger.debug("Ignoring answers for unknown questions: %s", unknown)
    return errors


def build_response(
    survey: Survey,
    answers: Mapping[str, Any],
    user_id: Optional[str] = None,
    clock: Callable[[], str] = utc_timestamp,
) -> SurveyResponse:
    """
    Turn submitted answers into a SurveyResponse.

    Unanswered questions are left out. Items follow document order and carry
    the question label current at submission time.
    """
    items = []
    for _, question in survey.iter_questions():
        value = answers.get(question.id)
        if _is_empty(value):
            continue
        if isinstance(value, (tuple, set)):
            value = list(value)
        items.append(ResponseItem(question_id=question.id, question_label=question.label, value=value))

    return SurveyResponse(
        survey_id=survey.id,
        responses=items,
        submitted_at=clock(),
        user_id=user_id,
    )


__all__ = [
    "FormField",
    "iter_fields",
    "validate_answers",
    "build_response",
]
