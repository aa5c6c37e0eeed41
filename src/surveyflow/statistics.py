"""
Statistics over submitted responses and workflow documents.

Read-only: nothing here modifies the values it summarizes.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from surveyflow.model import DocumentStatus, SurveyResponse, WorkflowDocument


@dataclass
class MonthlyCount:
    month: str  # "YYYY-MM"
    responses: int = 0
    documents: int = 0


@dataclass
class Statistics:
    """Dashboard numbers."""

    total_responses: int = 0
    survey_counts: Dict[str, int] = field(default_factory=dict)
    last_submission: Optional[str] = None

    total_documents: int = 0
    documents_by_status: Dict[str, int] = field(default_factory=dict)

    # approved documents as a percentage of all documents
    completion_rate: float = 0.0

    monthly: List[MonthlyCount] = field(default_factory=list)


def _month_of(timestamp: str) -> Optional[str]:
    # ISO timestamps start with YYYY-MM
    if timestamp and len(timestamp) >= 7 and timestamp[4] == "-":
        return timestamp[:7]
    return None


def compute_statistics(
    responses: Iterable[SurveyResponse],
    documents: Iterable[WorkflowDocument],
) -> Statistics:
    """
    Summarize responses and workflow documents.

    Responses without a survey id are counted under "unknown". The last
    submission is the submitted_at of the last response given.
    """
    responses = list(responses)
    documents = list(documents)
    stats = Statistics()

    stats.total_responses = len(responses)
    stats.survey_counts = dict(Counter(r.survey_id or "unknown" for r in responses))
    if responses:
        stats.last_submission = responses[-1].submitted_at

    stats.total_documents = len(documents)
    stats.documents_by_status = {status.value: 0 for status in DocumentStatus}
    for doc in documents:
        stats.documents_by_status[doc.status.value] += 1

    if documents:
        approved = stats.documents_by_status[DocumentStatus.APPROVED.value]
        stats.completion_rate = round(100.0 * approved / len(documents), 1)

    months: Dict[str, MonthlyCount] = {}
    for r in responses:
        month = _month_of(r.submitted_at)
        if month:
            months.setdefault(month, MonthlyCount(month)).responses += 1
    for doc in documents:
        month = _month_of(doc.created_at)
        if month:
            months.setdefault(month, MonthlyCount(month)).documents += 1
    stats.monthly = [months[m] for m in sorted(months)]

    return stats
