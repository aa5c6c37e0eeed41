"""
Workflow State Machine: legal transitions of a document approval chain.

Step states:
    pending -> in-progress -> completed         (approve path)
    pending | in-progress -> rejected           (reject path, terminal for the document)

Document states:
    draft | review -> approved                  (last step approved)
    draft | review -> rejected                  (any step rejected)

All transitions mutate the document in place and return it. A missing
document or step index yields None so callers can branch without
exception handling. Transitions on a terminal document raise
WorkflowTransitionError and leave the document untouched. Only the current
step (current_step - 1) can be approved, so at most one step is ever
in-progress.

IMPORTANT: This module holds no state. The list of documents belongs to the
caller (see surveyflow.store.WorkflowService).
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Callable, Iterable, Optional, Sequence, Tuple

from surveyflow.errors import WorkflowTransitionError
from surveyflow.model import (
    DocumentStatus,
    StepStatus,
    WorkflowDocument,
    WorkflowStep,
    utc_timestamp,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], str]


def _guard_not_terminal(document: WorkflowDocument, action: str) -> None:
    if document.status.is_terminal:
        raise WorkflowTransitionError(
            f"Cannot {action} step of document {document.id!r}: "
            f"document is already {document.status.value}"
        )


def new_document_id() -> str:
    return f"doc-{uuid.uuid4().hex}"


def create_document(
    title: str,
    content: str = "",
    steps: Optional[Iterable[WorkflowStep]] = None,
    status: DocumentStatus = DocumentStatus.DRAFT,
    clock: Clock = utc_timestamp,
) -> WorkflowDocument:
    """
    Create a new workflow document positioned at its first step.

    Args:
        title: Document title
        content: Document body
        steps: Approval steps, in order
        status: Initial document status (draft or review)
        clock: Timestamp source

    Returns:
        WorkflowDocument with a fresh id, current_step == 1, and
        created_at == updated_at

    A first step supplied as pending is made in-progress. Any other status
    on the first step is kept as given.
    """
    step_list = [replace(step, comments=list(step.comments)) for step in (steps or [])]

    if step_list:
        first = step_list[0]
        if first.status == StepStatus.PENDING:
            first.status = StepStatus.IN_PROGRESS
        elif first.status != StepStatus.IN_PROGRESS:
            logger.warning(
                "First step %r created with status %r; leaving it as supplied",
                first.id,
                first.status.value,
            )

    now = clock()
    document = WorkflowDocument(
        id=new_document_id(),
        title=title,
        content=content,
        status=DocumentStatus(status),
        current_step=1,
        steps=step_list,
        created_at=now,
        updated_at=now,
    )
    logger.info("Created workflow document %s with %d step(s)", document.id, len(step_list))
    return document


def approve_step(
    document: Optional[WorkflowDocument],
    step_index: int,
    clock: Clock = utc_timestamp,
) -> Optional[WorkflowDocument]:
    """
    Approve one step and advance the chain.

    Effects:
        - step -> completed, completed_at stamped
        - next step exists: current_step = step_index + 2, next step -> in-progress
        - otherwise: document -> approved (current_step unchanged)
        - updated_at stamped

    Returns:
        The updated document, or None if the document or step doesn't exist

    Raises:
        WorkflowTransitionError: If the document is already approved or rejected,
            the step is already finished, or step_index + 1 != current_step
    """
    if document is None:
        return None
    step = document.get_step(step_index)
    if step is None:
        return None
    _guard_not_terminal(document, "approve")
    if step.status.is_terminal:
        raise WorkflowTransitionError(
            f"Cannot approve step {step_index + 1} of document {document.id!r}: "
            f"step is already {step.status.value}"
        )
    if step_index + 1 != document.current_step:
        raise WorkflowTransitionError(
            f"Cannot approve step {step_index + 1} of document {document.id!r}: "
            f"current step is {document.current_step}"
        )

    now = clock()
    step.status = StepStatus.COMPLETED
    step.completed_at = now

    next_step = document.get_step(step_index + 1)
    if next_step is not None:
        document.current_step = step_index + 2
        next_step.status = StepStatus.IN_PROGRESS
    else:
        document.status = DocumentStatus.APPROVED
        logger.info("Workflow document %s approved", document.id)

    document.updated_at = now
    return document


def reject_step(
    document: Optional[WorkflowDocument],
    step_index: int,
    clock: Clock = utc_timestamp,
) -> Optional[WorkflowDocument]:
    """
    Reject one step. The whole document becomes rejected; current_step is kept.

    Returns:
        The updated document, or None if the document or step doesn't exist

    Raises:
        WorkflowTransitionError: If the document is already approved or rejected
    """
    if document is None:
        return None
    step = document.get_step(step_index)
    if step is None:
        return None
    _guard_not_terminal(document, "reject")

    step.status = StepStatus.REJECTED
    document.status = DocumentStatus.REJECTED
    document.updated_at = clock()
    logger.info("Workflow document %s rejected at step %d", document.id, step_index + 1)
    return document


def add_comment(
    document: Optional[WorkflowDocument],
    step_index: int,
    text: str,
    clock: Clock = utc_timestamp,
) -> Optional[WorkflowDocument]:
    """
    Append a comment to a step. Allowed on terminal documents.

    Returns:
        The updated document, or None if the document or step doesn't exist
    """
    if document is None:
        return None
    step = document.get_step(step_index)
    if step is None:
        return None

    step.comments.append(text)
    document.updated_at = clock()
    return document


def find_document(documents: Sequence[WorkflowDocument], document_id: str) -> Optional[WorkflowDocument]:
    for document in documents:
        if document.id == document_id:
            return document
    return None


def update_document(
    documents: Sequence[WorkflowDocument],
    document_id: str,
    clock: Clock = utc_timestamp,
    **changes,
) -> Optional[WorkflowDocument]:
    """
    Replace fields of the document with this id and stamp updated_at.

    id and created_at can't be changed this way.

    Returns:
        The updated document, or None if no document has this id
    """
    document = find_document(documents, document_id)
    if document is None:
        return None

    for name in ("id", "created_at"):
        changes.pop(name, None)
    for name, value in changes.items():
        if not hasattr(document, name):
            raise AttributeError(f"WorkflowDocument has no field {name!r}")
        setattr(document, name, value)

    document.updated_at = clock()
    return document


def current_step_of(document: WorkflowDocument) -> Optional[WorkflowStep]:
    """The step at current_step, or None for a document without steps."""
    return document.get_step(document.current_step - 1)


def progress(document: WorkflowDocument) -> Tuple[int, int]:
    """(completed steps, total steps)"""
    completed = sum(1 for step in document.steps if step.status == StepStatus.COMPLETED)
    return completed, len(document.steps)


__all__ = [
    "create_document",
    "approve_step",
    "reject_step",
    "add_comment",
    "find_document",
    "update_document",
    "current_step_of",
    "progress",
    "new_document_id",
]
