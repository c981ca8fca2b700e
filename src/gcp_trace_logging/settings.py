"""
gcp_trace_logging.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the logging pipeline and demo service.
- Fail fast with `ConfigurationError` when the project id is missing or malformed.
- Offer a cached settings instance for the composition root.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gcp_trace_logging.encoder import validate_project_id
from gcp_trace_logging.errors import ConfigurationError
from gcp_trace_logging.records import Severity


class Settings(BaseSettings):
    """
    - `project_id` has no default: running without one is a startup error.
    - Everything else defaults to the Cloud Run style setup (JSON lines on stderr).
    """

    model_config = SettingsConfigDict(
        env_prefix="TRACELOG_", case_sensitive=False, populate_by_name=True
    )

    # GOOGLE_CLOUD_PROJECT is what most GCP runtimes already export. `project_id=` as a
    # keyword still works through populate_by_name.
    project_id: str = Field(
        validation_alias=AliasChoices("TRACELOG_PROJECT_ID", "GOOGLE_CLOUD_PROJECT"),
    )
    log_level: str = "INFO"
    sink: Literal["stderr", "stdout"] = "stderr"
    carrier: Literal["ambient", "call_tree"] = "ambient"

    # Demo service
    service_name: str = "gcp-trace-logging-demo"
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    @field_validator("project_id")
    @classmethod
    def _check_project_id(cls, value: str) -> str:
        try:
            return validate_project_id(value)
        except ConfigurationError as e:
            raise ValueError(str(e)) from e

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        return Severity.parse(value).name

    @property
    def min_severity(self) -> Severity:
        return Severity[self.log_level]


def load_settings(**overrides: Any) -> Settings:
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"invalid logging configuration: {e}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars on every lookup.
    return load_settings()


# --- Module Notes -----------------------------------------------------------
# Settings are read once at startup; changing env vars afterwards has no effect
# unless `get_settings.cache_clear()` is called (tests do this).
