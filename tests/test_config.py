"""Tests for configuration loading and validation."""

from __future__ import annotations

import tempfile
from pathlib import Path
import unittest

from eventhub.config import DEFAULT_CONFIG, HubConfig, load_config
from eventhub.hub import EventHub


class ConfigTests(unittest.TestCase):
    """Validate per-table loading and fallback behavior."""

    def _write(self, temp_dir: str, text: str) -> Path:
        config_path = Path(temp_dir) / "config.toml"
        config_path.write_text(text.strip(), encoding="utf-8")
        return config_path

    def test_missing_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config = load_config(config_path=Path(temp_dir) / "config.toml")
        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertFalse(config["hub"]["bubbling"])
        self.assertEqual(config["hub"]["separator"], ":")
        self.assertEqual(config["logging"]["level"], "INFO")

    def test_partial_config_overrides_selected_values(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = self._write(
                temp_dir,
                """
[hub]
bubbling = true

[logging]
level = "debug"
                """,
            )
            config = load_config(config_path=config_path)
        self.assertTrue(config["hub"]["bubbling"])
        self.assertEqual(config["hub"]["separator"], ":")
        self.assertEqual(config["logging"]["level"], "DEBUG")
        self.assertEqual(
            config["logging"]["structured"], DEFAULT_CONFIG["logging"]["structured"]
        )

    def test_invalid_values_fallback_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = self._write(
                temp_dir,
                """
[hub]
separator = ""

[logging]
level = "LOUD"
                """,
            )
            with self.assertLogs("eventhub.config", level="WARNING") as logs:
                config = load_config(config_path=config_path)
        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertEqual(
            sum("config.section_invalid" in line for line in logs.output), 2
        )

    def test_invalid_section_keeps_other_sections(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = self._write(
                temp_dir,
                """
[hub]
bubbling = true
separator = "/"

[logging]
level = "LOUD"
                """,
            )
            with self.assertLogs("eventhub.config", level="WARNING") as logs:
                config = load_config(config_path=config_path)
        self.assertTrue(config["hub"]["bubbling"])
        self.assertEqual(config["hub"]["separator"], "/")
        self.assertEqual(config["logging"], DEFAULT_CONFIG["logging"])
        self.assertEqual(logs.records[0].section, "logging")

    def test_malformed_toml_falls_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = self._write(temp_dir, "[hub\nbubbling = ")
            with self.assertLogs("eventhub.config", level="WARNING") as logs:
                config = load_config(config_path=config_path)
        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertTrue(any("config.parse_failed" in line for line in logs.output))

    def test_loaded_hub_section_builds_a_hub(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = self._write(
                temp_dir,
                """
[hub]
bubbling = true
separator = "."
                """,
            )
            config = load_config(config_path=config_path)

        hub = EventHub.create(HubConfig(**config["hub"]))
        calls: list[str] = []
        hub.subscribe("job", lambda: calls.append("job"))
        hub.publish("job.done")
        self.assertEqual(calls, ["job"])

    def test_default_config_is_not_mutated_by_loading(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = self._write(temp_dir, "[hub]\nbubbling = true")
            config = load_config(config_path=config_path)
        config["hub"]["separator"] = "/"
        self.assertFalse(DEFAULT_CONFIG["hub"]["bubbling"])
        self.assertEqual(DEFAULT_CONFIG["hub"]["separator"], ":")


if __name__ == "__main__":
    unittest.main()
