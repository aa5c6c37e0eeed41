"""
SurveyFlow Package

Survey definitions, their XML form, and document approval workflows.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Form rendering or styling
    - Dialogs, routing, charts
    - Concrete storage backends (browser storage, JSON servers)

The core is three pieces:
    - model:       plain data (Survey, Section, Question, WorkflowDocument, ...)
    - xml_codec:   Survey <-> XML text
    - workflow:    approval-chain state machine

Everything else (forms, store, statistics, cli) consumes those unchanged.
"""

__version__ = "0.1.0"
