"""Configuration loading and validation for event hubs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "eventhub"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_SEPARATOR = ":"
VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class HubConfig(BaseModel):
    """Defaults applied by EventHub.create()."""

    bubbling: bool = False
    separator: str = DEFAULT_SEPARATOR

    @field_validator("separator", mode="before")
    @classmethod
    def _validate_separator(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("separator must be a string.")
        if not value:
            raise ValueError("separator must not be empty.")
        return value


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    propagate: bool = False
    log_file_path: str = "~/.local/state/eventhub/eventhub.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("log_file_path must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("log_file_path must not be empty.")
        return normalized


# Each TOML table is validated on its own, so one bad table falls back to its
# defaults without discarding the others.
SECTIONS: dict[str, type[BaseModel]] = {
    "hub": HubConfig,
    "logging": LoggingConfig,
}

DEFAULT_CONFIG: dict[str, dict[str, Any]] = {
    name: model().model_dump() for name, model in SECTIONS.items()
}


def _read_toml(target_path: Path) -> dict[str, Any]:
    if not target_path.exists():
        return {}
    try:
        return tomllib.loads(target_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        LOGGER.warning(
            "config.parse_failed",
            extra={
                "event": "config.parse_failed",
                "path": str(target_path),
                "reason": str(exc),
            },
        )
        return {}


def _validate_section(name: str, raw: Any) -> dict[str, Any]:
    model = SECTIONS[name]
    try:
        return model.model_validate(raw).model_dump()
    except ValidationError as exc:
        LOGGER.warning(
            "config.section_invalid",
            extra={
                "event": "config.section_invalid",
                "section": name,
                "reason": str(exc),
            },
        )
        return model().model_dump()


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """Load the ``[hub]`` and ``[logging]`` tables from TOML.

    Missing tables and keys take their defaults, unknown tables are ignored,
    and a table that fails validation is replaced by its defaults with a
    warning. A missing or unreadable file yields the defaults.
    """
    raw_data = _read_toml(config_path or CONFIG_PATH)
    return {name: _validate_section(name, raw_data.get(name, {})) for name in SECTIONS}
