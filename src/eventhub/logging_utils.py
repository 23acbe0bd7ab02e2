"""Output setup for the ``eventhub`` logger tree.

Only the package logger is touched, never the root logger: applications that
already configure logging keep their setup, and hubs log at DEBUG through
``logging.getLogger(__name__)`` either way.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError
import structlog

from .config import LoggingConfig, load_config
from .exceptions import ConfigValidationError

PACKAGE_LOGGER = "eventhub"
PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Marks handlers installed here so a second call replaces them.
_HANDLER_MARK = "_eventhub_handler"


def _json_formatter() -> logging.Formatter:
    # stdlib records only: a formatter-level chain, no structlog.configure().
    return structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(
            ensure_ascii=False, separators=(",", ":")
        ),
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ExtraAdder(),
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
        ],
    )


def _settings(logging_config: LoggingConfig | dict[str, Any] | None) -> LoggingConfig:
    if logging_config is None:
        return LoggingConfig(**load_config()["logging"])
    if isinstance(logging_config, LoggingConfig):
        return logging_config
    try:
        return LoggingConfig.model_validate(logging_config)
    except ValidationError as exc:
        raise ConfigValidationError(f"Invalid logging configuration: {exc}") from exc


def configure_logging(
    logging_config: LoggingConfig | dict[str, Any] | None = None,
) -> logging.Logger:
    """Attach output handlers to the ``eventhub`` logger and return it.

    Args:
        logging_config: ``[logging]`` settings; read from the config file
            when omitted.

    Raises:
        ConfigValidationError: ``logging_config`` holds invalid settings.
    """
    settings = _settings(logging_config)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(settings.level)
    logger.propagate = settings.propagate

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = (
        _json_formatter() if settings.structured else logging.Formatter(PLAIN_FORMAT)
    )
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_to_file:
        target = Path(settings.log_file_path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(target, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        logger.addHandler(handler)
    return logger
