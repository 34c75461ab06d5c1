"""Configuration loading.

Settings come from environment variables only (the function runtime has no
config file). Names match the deployed function's environment:

  MAPPING_TABLE_NAME, BUCKET_NAME, DISTRIBUTION_ID,
  UNIFORM_PROJECT_ID, UNIFORM_API_KEY     required
  UNIFORM_ORIGIN                          default https://uniform.app
  UNIFORM_ROUTE_ORIGIN                    default: UNIFORM_ORIGIN on .global
  RENDER_CONCURRENCY                      default 4
  LOG_LEVEL, LOG_FORMAT                   default INFO, json
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from routesnap.errors import ConfigurationError


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"


class Settings(LoggingSettings):
    mapping_table_name: str
    bucket_name: str
    distribution_id: str
    uniform_project_id: str
    uniform_api_key: str
    uniform_origin: str = "https://uniform.app"
    uniform_route_origin: str | None = None
    render_concurrency: int = Field(default=4, ge=1)


def load_settings(**overrides: object) -> Settings:
    """Load settings, converting validation failures to ConfigurationError."""
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as e:
        missing = [
            str(err["loc"][0]).upper()
            for err in e.errors()
            if err["type"] == "missing" and err["loc"]
        ]
        if missing:
            raise ConfigurationError(
                f"Missing one or more of {', '.join(missing)}"
            ) from e
        raise ConfigurationError(f"Invalid settings: {e.error_count()} error(s)") from e
