"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ago_diagnosis.fetch.config import FetchConfig


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    llm_model: str | None = Field(default=None, validation_alias="LLM_MODEL")
    llm_timeout_seconds: float = Field(
        default=30.0, gt=0, validation_alias="LLM_TIMEOUT_SECONDS"
    )
    rubric_path: Path | None = Field(default=None, validation_alias="RUBRIC_PATH")
    max_workers: int = Field(
        default=4, ge=1, le=64, validation_alias="DIAGNOSIS_MAX_WORKERS"
    )
    item_timeout_seconds: float = Field(
        default=30.0, gt=0, validation_alias="ITEM_TIMEOUT_SECONDS"
    )
    fetch_timeout_seconds: float = Field(
        default=15.0, ge=1.0, le=120.0, validation_alias="FETCH_TIMEOUT_SECONDS"
    )
    request_timeout_seconds: float = Field(
        default=120.0, gt=0, validation_alias="REQUEST_TIMEOUT_SECONDS"
    )
    host: str = Field(default="0.0.0.0", validation_alias="HOST")  # noqa: S104
    port: int = Field(default=3000, ge=1, le=65535, validation_alias="PORT")
    log_format: Literal["json", "console"] = Field(
        default="json", validation_alias="LOG_FORMAT"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    def fetch_config(self) -> FetchConfig:
        """Fetch configuration derived from these settings."""
        return FetchConfig(timeout_seconds=self.fetch_timeout_seconds)


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
