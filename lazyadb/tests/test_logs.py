from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
import sys

import structlog

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from lazyadb.logs import configure_logging, level_number  # noqa: E402


class LoggingTests(unittest.TestCase):
    def tearDown(self):
        structlog.reset_defaults()

    def test_writes_key_value_lines_to_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "logs" / "lazyadb.log"
            handle = configure_logging(path, "info")
            logger = structlog.get_logger()
            logger.debug("hidden_event")
            logger.info("modal_pushed", modal="help", depth=1)
            handle.close()
            text = path.read_text()
        self.assertNotIn("hidden_event", text)
        self.assertIn("level='info'", text)
        self.assertIn("event='modal_pushed'", text)
        self.assertIn("modal='help'", text)

    def test_level_number(self):
        self.assertEqual(level_number("warning"), 30)
        with self.assertRaises(ValueError):
            level_number("chatty")


if __name__ == "__main__":
    unittest.main()
