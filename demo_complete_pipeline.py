#!/usr/bin/env python3
"""
Complete Pipeline Demo: Survey → XML → Survey → Response, plus one approval chain

Shows the full workflow:
1. Encode the sample survey as XML and decode it again
2. Validate the survey and a set of answers, build a response
3. Walk a workflow document through approval
4. Print statistics
"""

import logging

from surveyflow.examples import build_sample_survey
from surveyflow.forms import build_response, validate_answers
from surveyflow.model import WorkflowStep
from surveyflow.statistics import compute_statistics
from surveyflow.store import InMemoryStore, ResponseRepository, WorkflowService
from surveyflow.validation import validate_survey
from surveyflow.xml_codec import survey_from_xml, survey_to_xml


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    store = InMemoryStore()

    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: Survey → XML → Response → Workflow")
    print("=" * 80)

    # =========================================================================
    # STEP 1: XML round-trip
    # =========================================================================
    print("\n1. XML ROUND-TRIP...")
    survey = build_sample_survey()
    xml_text = survey_to_xml(survey)
    restored = survey_from_xml(xml_text)
    print(f"   ✓ Encoded {len(xml_text)} characters")
    print(f"   ✓ Sections: {len(restored.sections)}")
    print(f"   ✓ Round-trip equal: {restored == survey}")

    # =========================================================================
    # STEP 2: Validation and response
    # =========================================================================
    print("\n2. VALIDATING...")
    result = validate_survey(restored)
    print(f"   ✓ Survey valid: {result.is_valid}")

    answers = {
        "department": "Engineering",
        "years": "7",
        "workplace-satisfaction": "Satisfied",
        "work-life-balance": "Neutral",
        "job-interest": "High",
    }
    problems = validate_answers(restored, answers)
    print(f"   ✓ Answer problems: {problems or 'none'}")
    responses = ResponseRepository(store)
    response_id = responses.save(build_response(restored, answers, user_id="demo"))
    print(f"   ✓ Saved response #{response_id}")

    # =========================================================================
    # STEP 3: Approval chain
    # =========================================================================
    print("\n3. APPROVAL CHAIN...")
    service = WorkflowService(store)
    doc = service.create(
        "Quarterly budget",
        "## Budget\n- Travel\n- Equipment",
        [
            WorkflowStep(id="step-1", name="Team lead", assignee="Sato"),
            WorkflowStep(id="step-2", name="Finance", assignee="Suzuki"),
            WorkflowStep(id="step-3", name="Director", assignee="Ito"),
        ],
    )
    for index in range(len(doc.steps)):
        doc = service.approve_step(doc.id, index)
        print(f"   ✓ Step {index + 1} approved -> status={doc.status.value}, current_step={doc.current_step}")

    # =========================================================================
    # STEP 4: Statistics
    # =========================================================================
    print("\n4. STATISTICS...")
    stats = compute_statistics(responses.list(), service.list())
    print(f"   ✓ Responses: {stats.total_responses}")
    print(f"   ✓ Documents: {stats.total_documents} ({stats.completion_rate}% approved)")


if __name__ == "__main__":
    main()
