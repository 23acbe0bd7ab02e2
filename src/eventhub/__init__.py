"""Top-level package for eventhub."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import ConfigValidationError, EventHubError, InvalidArgumentError
from .hub import HUB_METHODS, EventHub, Subscription, is_event_hub, mixin

if TYPE_CHECKING:
    from .config import load_config
    from .logging_utils import configure_logging

__all__ = [
    "ConfigValidationError",
    "EventHub",
    "EventHubError",
    "HUB_METHODS",
    "InvalidArgumentError",
    "Subscription",
    "configure_logging",
    "is_event_hub",
    "load_config",
    "mixin",
]


def __getattr__(name: str) -> Any:
    """Lazily import bootstrap helpers so importing the hub stays light."""
    if name == "load_config":
        from .config import load_config

        return load_config
    if name == "configure_logging":
        from .logging_utils import configure_logging

        return configure_logging
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
