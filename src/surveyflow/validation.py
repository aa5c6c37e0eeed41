"""
Survey and workflow validation: human-readable violation lists.

This pass never prevents construction of a value. It only flags problems
before a survey is persisted or a workflow document is trusted.

    validate_survey(survey)            -> ValidationResult
    check_workflow_invariants(document) -> List[str]
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Set

from surveyflow.model import (
    QUESTION_TYPES,
    DocumentStatus,
    Question,
    StepStatus,
    Survey,
    WorkflowDocument,
)


@dataclass
class ValidationResult:
    """Outcome of validate_survey."""

    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        if msg not in self.errors:
            self.errors.append(msg)


def _blank(value: str) -> bool:
    return not value or not value.strip()


def _check_question(result: ValidationResult, where: str, question: Question) -> None:
    if _blank(question.id):
        result.add_error(f"{where}: id is required")

    if _blank(question.label):
        result.add_error(f"{where}: label is required")

    if question.type not in QUESTION_TYPES:
        result.add_error(f"{where}: unknown question type '{question.type}'")

    if question.is_choice and not question.options:
        result.add_error(f"{where}: options are required for {question.type} questions")

    validation = question.validation
    if validation is None:
        return

    if validation.min is not None and validation.max is not None and validation.min > validation.max:
        result.add_error(f"{where}: validation min ({validation.min}) is greater than max ({validation.max})")

    if validation.pattern:
        try:
            re.compile(validation.pattern)
        except re.error as exc:
            result.add_error(f"{where}: invalid validation pattern '{validation.pattern}' ({exc})")


def validate_survey(survey: Survey) -> ValidationResult:
    """
    Check a survey for authoring mistakes.

    Checks for:
    - Empty survey id / title
    - Missing sections, empty section id / title, sections without questions
    - Duplicate section ids, duplicate question ids within a section
    - Empty question id / label, unknown question type
    - Choice questions without options
    - Inverted min/max bounds, uncompilable patterns

    Returns a ValidationResult; is_valid is True when no errors were found.
    """
    result = ValidationResult()

    if _blank(survey.id):
        result.add_error("Survey id is required")

    if _blank(survey.title):
        result.add_error("Title is required")

    if not survey.sections:
        result.add_error("At least one section is required")

    seen_sections: Set[str] = set()
    for section_number, section in enumerate(survey.sections, start=1):
        where = f"Section {section_number}"

        if _blank(section.id):
            result.add_error(f"{where}: id is required")
        elif section.id in seen_sections:
            result.add_error(f"{where}: duplicate section id '{section.id}'")
        seen_sections.add(section.id)

        if _blank(section.title):
            result.add_error(f"{where}: title is required")

        if not section.questions:
            result.add_error(f"{where}: at least one question is required")

        seen_questions: Set[str] = set()
        for question_number, question in enumerate(section.questions, start=1):
            question_where = f"{where} question {question_number}"
            _check_question(result, question_where, question)

            if question.id and question.id in seen_questions:
                result.add_error(f"{question_where}: duplicate question id '{question.id}'")
            seen_questions.add(question.id)

    return result


def check_workflow_invariants(document: WorkflowDocument) -> List[str]:
    """
    Report violations of the current-step invariant.

    For a non-terminal document with current_step = n:
        steps 1..n-1 completed, step n in-progress, steps after n pending.
    For an approved document every step must be completed.
    A rejected document must have at least one rejected step; progression
    is frozen so nothing else is checked.
    """
    problems: List[str] = []
    steps = document.steps

    if not steps:
        return problems

    if not 1 <= document.current_step <= len(steps):
        problems.append(
            f"current_step {document.current_step} is outside 1..{len(steps)}"
        )
        return problems

    if document.status == DocumentStatus.REJECTED:
        if not any(step.status == StepStatus.REJECTED for step in steps):
            problems.append("document is rejected but no step is rejected")
        return problems

    if document.status == DocumentStatus.APPROVED:
        for number, step in enumerate(steps, start=1):
            if step.status != StepStatus.COMPLETED:
                problems.append(f"step {number} ({step.id}) is {step.status.value} in an approved document")
        return problems

    active = document.current_step
    for number, step in enumerate(steps, start=1):
        if number < active:
            expected = StepStatus.COMPLETED
        elif number == active:
            expected = StepStatus.IN_PROGRESS
        else:
            expected = StepStatus.PENDING
        if step.status != expected:
            problems.append(
                f"step {number} ({step.id}) is {step.status.value}, expected {expected.value}"
            )

    return problems


__all__ = [
    "ValidationResult",
    "validate_survey",
    "check_workflow_invariants",
]
