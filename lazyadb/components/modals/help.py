"""Key reference overlay built from the active keybindings."""

from __future__ import annotations

from rich.table import Table

from lazyadb.components import Modal, RenderContext
from lazyadb.components.modals import HELP
from lazyadb.formatting import key_label
from lazyadb.widgets import overlay, titled_panel

SECTION_TITLES = {
    "global": "Anywhere",
    "navigation": "Panes",
    "devices": "Devices",
    "content": "Content",
    "emulators": "Emulators popup",
    "device_detail": "Device actions popup",
}


class HelpModal(Modal):
    component_id = HELP
    dismiss_keys = frozenset({"ESC", "?", "q"})
    height_percent = 70

    def __init__(self, keybindings: dict[str, dict[str, str]]) -> None:
        self._keybindings = keybindings

    def key_hints(self) -> list[tuple[str, str]]:
        return [("Esc", "Close")]

    def render(self, ctx: RenderContext):
        table = Table(box=None, expand=True, show_header=False, pad_edge=False)
        table.add_column("keys", style="bold", no_wrap=True)
        table.add_column("action")
        for section, title in SECTION_TITLES.items():
            bindings = self._keybindings.get(section) or {}
            if not bindings:
                continue
            table.add_row(f"[green]{title}[/green]", "")
            grouped: dict[str, list[str]] = {}
            for key, action in bindings.items():
                grouped.setdefault(action, []).append(key_label(key))
            for action, keys in grouped.items():
                table.add_row(" / ".join(keys), action.replace("_", " "))
        table.add_row("Esc", "close popup")
        panel = titled_panel("Help", table, border="green")
        return overlay(panel, ctx.width, ctx.height, self.width_percent, self.height_percent)
