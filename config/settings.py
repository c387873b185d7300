"""Configuration settings loaded from .env file."""

import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

from config.exceptions import InvalidConfigError


class Settings(BaseSettings):
    """Store settings, loaded from .env file.

    Directory names control the on-disk layout of every project root,
    so changing them for an existing project makes it unloadable.
    """

    # On-disk layout
    metadata_dir_name: str = ".novel"
    chapters_dir_name: str = "chapters"
    drafts_dir_name: str = "drafts"

    # Defaults for new content
    default_volume_title: str = "Volume 1"
    default_change_summary: str = "Auto-save"

    # Re-write project.json after every content update
    persist_on_content_update: bool = False

    # Logging
    log_dir: Path = Path("./data/logs")
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("metadata_dir_name", "chapters_dir_name", "drafts_dir_name")
    @classmethod
    def validate_dir_name(cls, v: str) -> str:
        if not v or v in (".", ".."):
            raise ValueError("Directory name must not be empty")
        if "/" in v or "\\" in v:
            raise ValueError(f"Directory name must not contain a path separator: {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown log_level: {v}")
        return v

    @model_validator(mode="after")
    def validate_distinct_dirs(self) -> "Settings":
        names = [self.metadata_dir_name, self.chapters_dir_name, self.drafts_dir_name]
        if len(set(names)) != len(names):
            raise ValueError(f"Directory names must be distinct: {names}")
        return self


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        InvalidConfigError: The environment or .env file holds an invalid value.
    """
    global _settings_instance
    if _settings_instance is None:
        try:
            _settings_instance = Settings()
        except PydanticValidationError as e:
            raise InvalidConfigError(
                f"Invalid settings: {e.error_count()} error(s)",
                {"errors": [err["msg"] for err in e.errors()]},
            ) from e
    return _settings_instance
