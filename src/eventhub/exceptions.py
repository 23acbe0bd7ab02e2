"""Domain exception hierarchy for the event hub."""

from __future__ import annotations


class EventHubError(RuntimeError):
    """Base class for all event hub errors."""


class InvalidArgumentError(EventHubError, TypeError):
    """Raised when a hub operation receives an argument it cannot use."""


class ConfigValidationError(EventHubError):
    """Raised when configuration cannot be validated safely."""
