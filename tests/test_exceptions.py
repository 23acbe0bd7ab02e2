"""Tests for domain exception hierarchy."""

from __future__ import annotations

import unittest

from eventhub.exceptions import (
    ConfigValidationError,
    EventHubError,
    InvalidArgumentError,
)


class ExceptionHierarchyTests(unittest.TestCase):
    """Validate exception inheritance contract."""

    def test_exception_hierarchy(self) -> None:
        self.assertTrue(issubclass(EventHubError, RuntimeError))
        self.assertTrue(issubclass(InvalidArgumentError, EventHubError))
        self.assertTrue(issubclass(ConfigValidationError, EventHubError))

    def test_invalid_argument_is_a_type_error(self) -> None:
        self.assertTrue(issubclass(InvalidArgumentError, TypeError))


if __name__ == "__main__":
    unittest.main()
