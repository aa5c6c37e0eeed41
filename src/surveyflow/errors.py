"""Exception hierarchy shared by every SurveyFlow module."""


class SurveyFlowError(Exception):
    """Base class for all SurveyFlow errors."""


class WorkflowTransitionError(SurveyFlowError):
    """Raised when a transition is attempted on a terminal workflow document."""


class StoreError(SurveyFlowError):
    """Raised when the persistence adapter rejects a read or write."""


class SurveyNotFoundError(SurveyFlowError):
    """Raised when a survey id is not present in the library."""


class DuplicateSurveyError(SurveyFlowError):
    """Raised when creating a survey whose id already exists."""


class SurveyImportError(SurveyFlowError):
    """Raised when imported survey data cannot be parsed or fails validation."""
