from __future__ import annotations

import contextlib
import io
import tempfile
import unittest
from pathlib import Path
import sys

import structlog

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from lazyadb.app import build_application, main  # noqa: E402
from lazyadb.bridge.client import AdbClient  # noqa: E402
from lazyadb.components.panes import DEVICES  # noqa: E402
from lazyadb.config import resolve_config  # noqa: E402


class MainTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.log_file = str(self.tmp / "lazyadb.log")

    def tearDown(self):
        structlog.reset_defaults()
        self._tmp.cleanup()

    def test_json_with_missing_adb_fails_cleanly(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            code = main(["--json", "--adb", "lazyadb-no-such-tool-xyz", "--log-file", self.log_file])
        self.assertEqual(code, 1)
        self.assertIn("not found", stderr.getvalue())
        self.assertIn("app_started", Path(self.log_file).read_text())

    def test_bad_config_is_a_usage_error(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["--config", str(self.tmp / "missing.json"), "--log-file", self.log_file])
        self.assertEqual(ctx.exception.code, 2)

    def test_build_application_focuses_devices(self):
        config_path = self.tmp / "config.json"
        config_path.write_text("{}")
        app = build_application(resolve_config(str(config_path)), AdbClient(adb_path="adb"))
        try:
            self.assertEqual(app.focused_pane_id, DEVICES)
            self.assertEqual([p.component_id for p in app.panes], ["header", "devices", "content", "status"])
        finally:
            app.executor.shutdown()


if __name__ == "__main__":
    unittest.main()
