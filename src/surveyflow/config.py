"""Runtime configuration, read from SURVEYFLOW_* environment variables or a .env file."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SurveyFlow settings.

    Examples
    --------
    Override via environment::

        export SURVEYFLOW_LOG_LEVEL=DEBUG
        export SURVEYFLOW_DEFAULT_AUTHOR="HR Department"
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SURVEYFLOW_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Store key namespaces
    survey_key_prefix: str = "survey_xml_"
    template_key_prefix: str = "survey_template_"
    workflow_key_prefix: str = "workflow_document_"
    response_key_prefix: str = "survey_response_"

    # XML output
    xml_indent: str = "  "

    # Survey library defaults
    default_author: str = "Unknown"
    default_version: str = "1.0"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return Settings()
