"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDCMS_"


class Settings(BaseModel):
    app_name:         str = "mdcms"
    content_dir:      str = Field(default=".", description="Root directory for file storage")
    storage_backend:  str = Field(default="file", pattern="^(file|sql)$", description="file or sql")
    db_url:           str = Field(default="sqlite:///mdcms.db", description="Database URL for sql storage")
    default_format:   str = Field(default="json", pattern="^(json|markdown)$", description="json or markdown")
    locales:          list[str] = Field(default_factory=list, description="Locales included in backups")
    words_per_minute: int = Field(default=200, ge=1, description="Reading speed for reading time")
    log_level:        str = Field(default="INFO", description="Logging level name")

    @field_validator("locales", mode="before")
    @classmethod
    def _split_locales(cls, value: Any) -> Any:
        """Accept a comma-separated string (env vars) as well as a list."""
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDCMS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings: {e}") from e
