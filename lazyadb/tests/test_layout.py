from __future__ import annotations

import io
import unittest
from pathlib import Path
import sys

from rich.console import Console

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from lazyadb.components.modals.help import HelpModal  # noqa: E402
from lazyadb.components.panes import DEVICES, default_panes  # noqa: E402
from lazyadb.config import DEFAULTS, merge_keybindings  # noqa: E402
from lazyadb.formatting import compact_relative_age, device_label, hint, key_label, tail_lines  # noqa: E402
from lazyadb.layout import body_height, select_layout_mode, sidebar_ratio  # noqa: E402
from lazyadb.models import CONNECTION_EMULATOR, Device  # noqa: E402
from lazyadb.screen import build_frame  # noqa: E402
from lazyadb.tests.doubles import make_app  # noqa: E402


class LayoutTests(unittest.TestCase):
    def test_narrow(self):
        self.assertEqual(select_layout_mode(80), "narrow")

    def test_medium(self):
        self.assertEqual(select_layout_mode(120), "medium")

    def test_wide(self):
        self.assertEqual(select_layout_mode(180), "wide")

    def test_sidebar_ratio(self):
        self.assertEqual(sidebar_ratio("wide"), (1, 3))
        self.assertEqual(sidebar_ratio("medium"), (1, 2))

    def test_body_height(self):
        self.assertEqual(body_height(24), 20)
        self.assertEqual(body_height(2), 1)


class FormattingTests(unittest.TestCase):
    def test_device_label(self):
        self.assertEqual(device_label(None), "<none>")
        device = Device("emulator-5554", "device", CONNECTION_EMULATOR, model="sdk_gphone64")
        self.assertEqual(device_label(device), "sdk gphone64 (emulator-5554)")

    def test_hint_uses_first_two_keys(self):
        keymap = {"j": "down", "DOWN": "down", "J": "down", "q": "quit"}
        self.assertEqual(hint(keymap, "down", "Next"), ("j/↓", "Next"))
        self.assertIsNone(hint(keymap, "help", "Help"))
        self.assertEqual(key_label("BACKTAB"), "S-Tab")

    def test_compact_relative_age(self):
        self.assertEqual(compact_relative_age(12), "12s ago")
        self.assertEqual(compact_relative_age(180), "3m ago")
        self.assertEqual(compact_relative_age(None), "n/a")

    def test_tail_lines(self):
        self.assertEqual(tail_lines("a\nb\nc\n", 2), ["b", "c"])
        self.assertEqual(tail_lines("a", 0), [])


class FrameTests(unittest.TestCase):
    def _render(self, app, width=120, height=30) -> str:
        buffer = io.StringIO()
        console = Console(file=buffer, width=width, height=height, color_system=None, legacy_windows=False)
        console.print(build_frame(app, width, height))
        return buffer.getvalue()

    def _app(self):
        config = dict(DEFAULTS)
        config["keybindings"] = merge_keybindings(None)
        return make_app(default_panes(config), focus=DEVICES), config

    def test_dashboard_frame(self):
        app, _ = self._app()
        text = self._render(app)
        self.assertIn("LazyADB", text)
        self.assertIn("Devices (0)", text)
        self.assertIn("Content", text)
        self.assertIn("Next", text)

    def test_narrow_frame_renders(self):
        app, _ = self._app()
        self.assertIn("Devices (0)", self._render(app, width=70))

    def test_modal_takes_over_body(self):
        app, config = self._app()
        app.push_modal(HelpModal(config["keybindings"]))
        text = self._render(app)
        self.assertIn("Help", text)
        self.assertIn("Close", text)
        self.assertNotIn("Devices (0)", text)


if __name__ == "__main__":
    unittest.main()
