from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from lazyadb.config import DEFAULT_KEYBINDINGS, merge_keybindings, resolve_config  # noqa: E402
from lazyadb.errors import ConfigError  # noqa: E402


class ConfigTests(unittest.TestCase):
    def _write(self, tmp: str, payload) -> str:
        path = Path(tmp) / "config.json"
        path.write_text(payload if isinstance(payload, str) else json.dumps(payload))
        return str(path)

    def test_defaults_with_explicit_empty_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            config = resolve_config(self._write(tmp, {}))
        self.assertEqual(config["refresh_seconds"], 2)
        self.assertEqual(config["keybindings"], DEFAULT_KEYBINDINGS)

    def test_overrides_and_minimums(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write(tmp, {"refresh_seconds": 0, "notice_seconds": 8})
            config = resolve_config(path)
        self.assertEqual(config["refresh_seconds"], 1)
        self.assertEqual(config["notice_seconds"], 8)

    def test_cli_refresh_wins(self):
        with tempfile.TemporaryDirectory() as tmp:
            config = resolve_config(self._write(tmp, {"refresh_seconds": 10}), refresh_override=3)
        self.assertEqual(config["refresh_seconds"], 3)

    def test_missing_explicit_path(self):
        with self.assertRaises(ConfigError):
            resolve_config("/nonexistent/lazyadb/config.json")

    def test_invalid_json_and_non_object(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                resolve_config(self._write(tmp, "{not json"))
            with self.assertRaises(ConfigError):
                resolve_config(self._write(tmp, [1, 2]))

    def test_config_error_is_value_error(self):
        with self.assertRaises(ValueError):
            merge_keybindings({"nope": {}})

    def test_keybinding_merge_and_unbind(self):
        merged = merge_keybindings({"devices": {"J": "down", "j": None}})
        self.assertEqual(merged["devices"]["J"], "down")
        self.assertNotIn("j", merged["devices"])
        self.assertIn("j", DEFAULT_KEYBINDINGS["devices"])

    def test_keybinding_section_must_be_object(self):
        with self.assertRaises(ConfigError):
            merge_keybindings({"devices": ["j"]})


if __name__ == "__main__":
    unittest.main()
