"""
Serialization helpers for SurveyFlow objects (Survey, WorkflowDocument, SurveyResponse).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
Dict keys use the camelCase names of the stored JSON records
(currentStep, createdAt, questionLabel, ...) so existing data loads unchanged.
This module intentionally keeps serialization structure stable and explicit.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from surveyflow.model import (
    DocumentStatus,
    Question,
    ResponseItem,
    Section,
    StepStatus,
    Survey,
    SurveyMetadata,
    SurveyResponse,
    Validation,
    WorkflowDocument,
    WorkflowStep,
    TEXT,
)


def validation_to_dict(v: Validation | None) -> Dict[str, Any] | None:
    if v is None:
        return None
    return {"min": v.min, "max": v.max, "pattern": v.pattern}


def validation_from_dict(d: Dict[str, Any] | None) -> Validation | None:
    if d is None:
        return None
    return Validation(min=d.get("min"), max=d.get("max"), pattern=d.get("pattern"))


def metadata_to_dict(m: SurveyMetadata | None) -> Dict[str, Any] | None:
    if m is None:
        return None
    return {"created": m.created, "version": m.version, "author": m.author}


def metadata_from_dict(d: Dict[str, Any] | None) -> SurveyMetadata | None:
    if d is None:
        return None
    return SurveyMetadata(
        created=d.get("created") or "",
        version=d.get("version") or "",
        author=d.get("author") or "",
    )


def question_to_dict(q: Question) -> Dict[str, Any]:
    return {
        "id": q.id,
        "type": q.type,
        "label": q.label,
        "required": q.required,
        "options": list(q.options),
        "placeholder": q.placeholder,
        "validation": validation_to_dict(q.validation),
    }


def question_from_dict(d: Dict[str, Any]) -> Question:
    return Question(
        id=d["id"],
        type=d.get("type") or TEXT,
        label=d.get("label", ""),
        required=bool(d.get("required", False)),
        options=list(d.get("options") or []),
        placeholder=d.get("placeholder") or "",
        validation=validation_from_dict(d.get("validation")),
    )


def section_to_dict(s: Section) -> Dict[str, Any]:
    return {
        "id": s.id,
        "title": s.title,
        "description": s.description,
        "questions": [question_to_dict(q) for q in s.questions],
    }


def section_from_dict(d: Dict[str, Any]) -> Section:
    return Section(
        id=d["id"],
        title=d.get("title", ""),
        description=d.get("description") or "",
        questions=[question_from_dict(q) for q in d.get("questions", [])],
    )


def survey_to_dict(s: Survey) -> Dict[str, Any]:
    return {
        "id": s.id,
        "title": s.title,
        "description": s.description,
        "metadata": metadata_to_dict(s.metadata),
        "sections": [section_to_dict(sec) for sec in s.sections],
    }


def survey_from_dict(d: Dict[str, Any]) -> Survey:
    s = Survey(id=d.get("id", ""), title=d.get("title", ""))
    s.description = d.get("description") or ""
    s.metadata = metadata_from_dict(d.get("metadata"))
    s.sections = [section_from_dict(sec) for sec in d.get("sections", [])]
    return s


def step_to_dict(s: WorkflowStep) -> Dict[str, Any]:
    return {
        "id": s.id,
        "name": s.name,
        "assignee": s.assignee,
        "status": s.status.value,
        "comments": list(s.comments),
        "completedAt": s.completed_at,
    }


def step_from_dict(d: Dict[str, Any]) -> WorkflowStep:
    return WorkflowStep(
        id=d["id"],
        name=d.get("name", ""),
        assignee=d.get("assignee", ""),
        status=StepStatus(d.get("status", StepStatus.PENDING.value)),
        comments=list(d.get("comments") or []),
        completed_at=d.get("completedAt"),
    )


def document_to_dict(doc: WorkflowDocument) -> Dict[str, Any]:
    return {
        "id": doc.id,
        "title": doc.title,
        "content": doc.content,
        "status": doc.status.value,
        "currentStep": doc.current_step,
        "steps": [step_to_dict(s) for s in doc.steps],
        "createdAt": doc.created_at,
        "updatedAt": doc.updated_at,
    }


def document_from_dict(d: Dict[str, Any]) -> WorkflowDocument:
    return WorkflowDocument(
        id=d["id"],
        title=d.get("title", ""),
        content=d.get("content", ""),
        status=DocumentStatus(d.get("status", DocumentStatus.DRAFT.value)),
        current_step=int(d.get("currentStep", 1)),
        steps=[step_from_dict(s) for s in d.get("steps", [])],
        created_at=d.get("createdAt", ""),
        updated_at=d.get("updatedAt", ""),
    )


def response_to_dict(r: SurveyResponse) -> Dict[str, Any]:
    return {
        "surveyId": r.survey_id,
        "responses": [
            {"questionId": item.question_id, "questionLabel": item.question_label, "value": item.value}
            for item in r.responses
        ],
        "submittedAt": r.submitted_at,
        "userId": r.user_id,
    }


def response_from_dict(d: Dict[str, Any]) -> SurveyResponse:
    items = [
        ResponseItem(
            question_id=item["questionId"],
            question_label=item.get("questionLabel", ""),
            value=item.get("value"),
        )
        for item in d.get("responses", [])
    ]
    return SurveyResponse(
        survey_id=d["surveyId"],
        responses=items,
        submitted_at=d.get("submittedAt", ""),
        user_id=d.get("userId"),
    )


def survey_to_json(s: Survey, indent: int | None = None) -> str:
    return json.dumps(survey_to_dict(s), ensure_ascii=False, indent=indent)


def survey_from_json(s: str) -> Survey:
    d = json.loads(s)
    return survey_from_dict(d)


def survey_to_yaml(s: Survey) -> str:
    return yaml.safe_dump(survey_to_dict(s), allow_unicode=True, sort_keys=False)


def survey_from_yaml(s: str) -> Survey:
    d = yaml.safe_load(s)
    return survey_from_dict(d)


def document_to_json(doc: WorkflowDocument) -> str:
    return json.dumps(document_to_dict(doc), ensure_ascii=False)


def document_from_json(s: str) -> WorkflowDocument:
    return document_from_dict(json.loads(s))


def response_to_json(r: SurveyResponse) -> str:
    return json.dumps(response_to_dict(r), ensure_ascii=False)


def response_from_json(s: str) -> SurveyResponse:
    return response_from_dict(json.loads(s))
