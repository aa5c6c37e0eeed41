"""
Persistence adapter contract and the repositories built on top of it.

The core never talks to a concrete backend. Anything offering get / set /
remove / list_keys over string keys and string values can hold surveys,
workflow documents and responses:

    KeyValueStore          the adapter contract (Protocol)
    InMemoryStore          dict-backed reference implementation

    SurveyXmlRepository    surveys stored as codec XML       (survey_xml_<id>)
    SurveyLibrary          editable survey templates, JSON   (survey_template_<id>)
    WorkflowService        workflow documents, JSON          (workflow_document_<id>)
    ResponseRepository     submitted responses, JSON         (survey_response_<n>)

Write failures surface as StoreError from the adapter and are not retried.
"""
from __future__ import annotations

import copy
import json
import logging
import re
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from surveyflow import workflow
from surveyflow.config import get_settings
from surveyflow.errors import (
    DuplicateSurveyError,
    StoreError,
    SurveyImportError,
    SurveyNotFoundError,
)
from surveyflow.model import (
    DocumentStatus,
    Survey,
    SurveyMetadata,
    SurveyResponse,
    WorkflowDocument,
    WorkflowStep,
    utc_timestamp,
)
from surveyflow.serialization import (
    document_from_json,
    document_to_json,
    response_from_json,
    response_to_json,
    survey_from_dict,
    survey_from_json,
    survey_to_json,
)
from surveyflow.validation import validate_survey
from surveyflow.xml_codec import survey_from_xml, survey_to_xml

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """
    Minimal storage contract.

    get(key) -> value or None
    set(key, value) -> None; raises StoreError when the write is rejected
    remove(key) -> True if the key existed
    list_keys(prefix) -> keys starting with prefix, sorted
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> bool:
        ...

    def list_keys(self, prefix: str = "") -> List[str]:
        ...


class InMemoryStore:
    """KeyValueStore backed by a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StoreError(f"Refusing to store non-string value under {key!r}")
        self._data[key] = value

    def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def list_keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in self._data if k.startswith(prefix))

    def __len__(self) -> int:
        return len(self._data)


def _today() -> str:
    return date.today().isoformat()


def _leading_int(text: str, default: int) -> int:
    match = re.match(r"\s*(\d+)", text or "")
    return int(match.group(1)) if match and int(match.group(1)) else default


def increment_version(version: str) -> str:
    """Bump the minor part of a "major.minor" version: "1.0" -> "1.1", "2" -> "2.1"."""
    parts = (version or "").split(".")
    major = _leading_int(parts[0], 1)
    minor = _leading_int(parts[1], 0) if len(parts) > 1 else 0
    return f"{major}.{minor + 1}"


# =============================================================================
# SURVEYS AS XML
# =============================================================================


class SurveyXmlRepository:
    """Surveys stored as XML documents, one key per survey id."""

    def __init__(self, store: KeyValueStore, prefix: Optional[str] = None) -> None:
        self._store = store
        self._prefix = prefix if prefix is not None else get_settings().survey_key_prefix

    def _key(self, survey_id: str) -> str:
        return f"{self._prefix}{survey_id}"

    def save(self, survey: Survey) -> None:
        self._store.set(self._key(survey.id), survey_to_xml(survey))
        logger.debug("Saved survey %r as XML", survey.id)

    def load(self, survey_id: str) -> Optional[Survey]:
        xml_text = self._store.get(self._key(survey_id))
        if xml_text is None:
            return None
        return survey_from_xml(xml_text)

    def list_ids(self) -> List[str]:
        return [key[len(self._prefix):] for key in self._store.list_keys(self._prefix)]

    def delete(self, survey_id: str) -> bool:
        return self._store.remove(self._key(survey_id))

    def delete_many(self, survey_ids: Iterable[str]) -> int:
        return sum(1 for survey_id in survey_ids if self.delete(survey_id))

    def clear(self) -> int:
        return self.delete_many(self.list_ids())


# =============================================================================
# SURVEY LIBRARY
# =============================================================================


class SurveyLibrary:
    """
    Editable survey templates.

    Surveys are stored as JSON so nothing is lost (the XML form drops
    validation patterns and blank options). Metadata is maintained here:
    create stamps it, update bumps the minor version, duplicate resets it.
    """

    def __init__(
        self,
        store: KeyValueStore,
        prefix: Optional[str] = None,
        today: Callable[[], str] = _today,
    ) -> None:
        self._store = store
        self._prefix = prefix if prefix is not None else get_settings().template_key_prefix
        self._today = today

    def _key(self, survey_id: str) -> str:
        return f"{self._prefix}{survey_id}"

    def _put(self, survey: Survey) -> None:
        self._store.set(self._key(survey.id), survey_to_json(survey))

    def exists(self, survey_id: str) -> bool:
        return self._store.get(self._key(survey_id)) is not None

    def get(self, survey_id: str) -> Optional[Survey]:
        raw = self._store.get(self._key(survey_id))
        return survey_from_json(raw) if raw is not None else None

    def list(self) -> List[Survey]:
        surveys = []
        for key in self._store.list_keys(self._prefix):
            raw = self._store.get(key)
            if raw is not None:
                surveys.append(survey_from_json(raw))
        return surveys

    def create(self, survey: Survey) -> Survey:
        """
        Add a new survey.

        Raises:
            DuplicateSurveyError: If a survey with this id already exists
        """
        if self.exists(survey.id):
            raise DuplicateSurveyError(f'Survey id "{survey.id}" already exists')

        settings = get_settings()
        previous = survey.metadata or SurveyMetadata()
        survey.metadata = SurveyMetadata(
            created=self._today(),
            version=previous.version or settings.default_version,
            author=previous.author or settings.default_author,
        )
        self._put(survey)
        logger.info("Created survey %r", survey.id)
        return survey

    def update(self, survey: Survey) -> Survey:
        """
        Replace an existing survey, keeping its creation date and bumping its version.

        Raises:
            SurveyNotFoundError: If no survey has this id
        """
        stored = self.get(survey.id)
        if stored is None:
            raise SurveyNotFoundError(f'Survey id "{survey.id}" not found')

        settings = get_settings()
        old = stored.metadata or SurveyMetadata()
        new = survey.metadata or SurveyMetadata()
        survey.metadata = SurveyMetadata(
            created=old.created or self._today(),
            version=increment_version(old.version or settings.default_version),
            author=new.author or old.author or settings.default_author,
        )
        self._put(survey)
        logger.info("Updated survey %r to version %s", survey.id, survey.metadata.version)
        return survey

    def delete(self, survey_id: str) -> bool:
        """
        Raises:
            SurveyNotFoundError: If no survey has this id
        """
        if not self._store.remove(self._key(survey_id)):
            raise SurveyNotFoundError(f'Survey id "{survey_id}" not found')
        logger.info("Deleted survey %r", survey_id)
        return True

    def duplicate(self, survey_id: str, new_id: str) -> Survey:
        """
        Copy a survey under a new id with a fresh 1.0 version.

        Raises:
            SurveyNotFoundError: If survey_id doesn't exist
            DuplicateSurveyError: If new_id already exists
        """
        original = self.get(survey_id)
        if original is None:
            raise SurveyNotFoundError(f'Survey id "{survey_id}" not found')
        if self.exists(new_id):
            raise DuplicateSurveyError(f'Survey id "{new_id}" already exists')

        settings = get_settings()
        copied = copy.deepcopy(original)
        copied.id = new_id
        copied.title = f"{original.title} (copy)"
        copied.metadata = SurveyMetadata(
            created=self._today(),
            version=settings.default_version,
            author=(original.metadata.author if original.metadata else "") or settings.default_author,
        )
        self._put(copied)
        return copied

    def export_json(self, survey_id: str) -> str:
        survey = self.get(survey_id)
        if survey is None:
            raise SurveyNotFoundError(f'Survey id "{survey_id}" not found')
        return survey_to_json(survey, indent=2)

    def import_json(self, text: str) -> Survey:
        """
        Create a survey from exported JSON.

        Raises:
            SurveyImportError: If the JSON is unreadable or the survey fails validation
            DuplicateSurveyError: If the survey id already exists
        """
        try:
            survey = survey_from_dict(json.loads(text))
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise SurveyImportError(f"Could not parse survey JSON: {exc}") from exc

        result = validate_survey(survey)
        if not result.is_valid:
            raise SurveyImportError("Import failed: " + ", ".join(result.errors))
        return self.create(survey)


# =============================================================================
# WORKFLOW DOCUMENTS
# =============================================================================


class WorkflowService:
    """
    Workflow documents held in a caller-owned list and mirrored to a store.

    Transitions are delegated to surveyflow.workflow and run on a copy of
    the held document. The copy replaces it in the list only after the store
    accepted the write, so a StoreError leaves memory and store in agreement.
    Lookups and transitions on an unknown id return None.
    """

    def __init__(
        self,
        store: KeyValueStore,
        documents: Optional[List[WorkflowDocument]] = None,
        prefix: Optional[str] = None,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self._store = store
        self._prefix = prefix if prefix is not None else get_settings().workflow_key_prefix
        self._clock = clock
        self.documents: List[WorkflowDocument] = documents if documents is not None else self._load()

    def _key(self, document_id: str) -> str:
        return f"{self._prefix}{document_id}"

    def _load(self) -> List[WorkflowDocument]:
        documents = []
        for key in self._store.list_keys(self._prefix):
            raw = self._store.get(key)
            if raw is not None:
                documents.append(document_from_json(raw))
        logger.debug("Loaded %d workflow document(s)", len(documents))
        return documents

    def _persist(self, document: WorkflowDocument) -> WorkflowDocument:
        self._store.set(self._key(document.id), document_to_json(document))
        return document

    def _transition(
        self,
        document_id: str,
        apply: Callable[[WorkflowDocument], Optional[WorkflowDocument]],
    ) -> Optional[WorkflowDocument]:
        # Work on a copy; the held document is replaced only once the store accepted the write.
        current = self.get(document_id)
        if current is None:
            return None
        draft = apply(copy.deepcopy(current))
        if draft is None:
            return None
        self._persist(draft)
        index = next(i for i, held in enumerate(self.documents) if held is current)
        self.documents[index] = draft
        return draft

    def list(self) -> List[WorkflowDocument]:
        return list(self.documents)

    def get(self, document_id: str) -> Optional[WorkflowDocument]:
        return workflow.find_document(self.documents, document_id)

    def add(self, document: WorkflowDocument) -> WorkflowDocument:
        """Register an existing document (e.g. sample data) as-is."""
        self._persist(document)
        self.documents.append(document)
        return document

    def create(
        self,
        title: str,
        content: str = "",
        steps: Optional[Iterable[WorkflowStep]] = None,
        status: DocumentStatus = DocumentStatus.DRAFT,
    ) -> WorkflowDocument:
        document = workflow.create_document(title, content, steps, status=status, clock=self._clock)
        return self.add(document)

    def update(self, document_id: str, **changes) -> Optional[WorkflowDocument]:
        return self._transition(
            document_id,
            lambda draft: workflow.update_document([draft], document_id, clock=self._clock, **changes),
        )

    def delete(self, document_id: str) -> bool:
        document = self.get(document_id)
        if document is None:
            return False
        self._store.remove(self._key(document_id))
        self.documents.remove(document)
        return True

    def approve_step(self, document_id: str, step_index: int) -> Optional[WorkflowDocument]:
        """
        Raises:
            WorkflowTransitionError: If the step is not the current one or the document is finished
        """
        return self._transition(
            document_id,
            lambda draft: workflow.approve_step(draft, step_index, clock=self._clock),
        )

    def reject_step(self, document_id: str, step_index: int) -> Optional[WorkflowDocument]:
        return self._transition(
            document_id,
            lambda draft: workflow.reject_step(draft, step_index, clock=self._clock),
        )

    def add_comment(self, document_id: str, step_index: int, text: str) -> Optional[WorkflowDocument]:
        """
        Raises:
            ValueError: If text is empty or whitespace only
        """
        if not text or not text.strip():
            raise ValueError("Comment text must not be empty")
        return self._transition(
            document_id,
            lambda draft: workflow.add_comment(draft, step_index, text, clock=self._clock),
        )


# =============================================================================
# RESPONSES
# =============================================================================


class ResponseRepository:
    """Submitted responses, numbered in submission order."""

    def __init__(self, store: KeyValueStore, prefix: Optional[str] = None) -> None:
        self._store = store
        self._prefix = prefix if prefix is not None else get_settings().response_key_prefix

    def _ids(self) -> List[int]:
        ids = []
        for key in self._store.list_keys(self._prefix):
            suffix = key[len(self._prefix):]
            if suffix.isdigit():
                ids.append(int(suffix))
        return sorted(ids)

    def _key(self, response_id: int) -> str:
        return f"{self._prefix}{response_id}"

    def save(self, response: SurveyResponse) -> int:
        """Store a response and return its number."""
        ids = self._ids()
        response_id = ids[-1] + 1 if ids else 1
        self._store.set(self._key(response_id), response_to_json(response))
        logger.info("Saved response %d for survey %r", response_id, response.survey_id)
        return response_id

    def get(self, response_id: int) -> Optional[SurveyResponse]:
        raw = self._store.get(self._key(response_id))
        return response_from_json(raw) if raw is not None else None

    def list(self) -> List[SurveyResponse]:
        return [r for r in (self.get(i) for i in self._ids()) if r is not None]

    def list_for_survey(self, survey_id: str) -> List[SurveyResponse]:
        return [r for r in self.list() if r.survey_id == survey_id]

    def delete(self, response_id: int) -> bool:
        return self._store.remove(self._key(response_id))

    def clear(self) -> int:
        return sum(1 for i in self._ids() if self.delete(i))


__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "SurveyXmlRepository",
    "SurveyLibrary",
    "WorkflowService",
    "ResponseRepository",
    "increment_version",
]
