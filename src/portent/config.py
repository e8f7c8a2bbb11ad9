from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from portent.utils.exceptions import ConfigurationError

REQUIRED_ENV_VARS = ("API_KEY", "BOT_TOKEN", "FOLDER_ID")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    # Credentials
    api_key: str = Field(..., min_length=1)
    bot_token: str = Field(..., min_length=1)
    folder_id: str = Field(..., min_length=1)

    # Topics file
    settings_path: Path = Field(default=Path("./settings.json"))

    # Telegram
    telegram_api_url: str = Field(default="https://api.telegram.org")
    poll_limit: int = Field(default=100, ge=1, le=100)
    poll_timeout: int = Field(default=30, ge=0)
    poll_error_delay_seconds: float = Field(default=1.0, ge=0.0)

    # Completion
    completion_url: str = Field(
        default="https://llm.api.cloud.yandex.net/foundationModels/v1/completion"
    )
    model_name: str = Field(default="yandexgpt-lite")
    completion_timeout_seconds: float = Field(default=30.0, gt=0.0)

    # Handler workers
    max_concurrent_handlers: int = Field(default=16, ge=1)
    handler_queue_size: int = Field(default=100, ge=1)

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = False

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        """Accept standard logging level names in any case."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return level


class TopicSettings(BaseModel):
    """Contents of the JSON settings file."""

    model_config = ConfigDict(extra="ignore")

    units: list[str] = Field(..., min_length=1)

    @field_validator("units")
    @classmethod
    def dedupe_units(cls, v: list[str]) -> list[str]:
        """Drop repeated topics, keeping the first occurrence."""
        return list(dict.fromkeys(v))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        return Settings()
    except ValidationError as exc:
        missing = sorted(
            str(error["loc"][0]).upper()
            for error in exc.errors()
            if error["loc"] and str(error["loc"][0]).upper() in REQUIRED_ENV_VARS
        )
        if missing:
            raise ConfigurationError(
                f"Missing required environment values: {', '.join(missing)}"
            ) from exc
        raise ConfigurationError(f"Invalid settings: {exc}") from exc


def load_topics(path: Path | str) -> tuple[str, ...]:
    """
    Read the topic words from the JSON settings file.

    Args:
        path: Location of the settings file

    Returns:
        Topics in first-seen order with duplicates removed

    Raises:
        ConfigurationError: If the file cannot be read or has no topics
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
        data = json.loads(raw)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read settings file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Settings file {path} is not valid JSON: {exc}") from exc

    try:
        topic_settings = TopicSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Settings file {path} is invalid: {exc}") from exc

    return tuple(topic_settings.units)
