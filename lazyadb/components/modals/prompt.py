"""Single-line text input overlay."""

from __future__ import annotations

from rich.console import Group
from rich.text import Text

from lazyadb.commands import PopModal, SendTo
from lazyadb.components import Modal, RenderContext
from lazyadb.components.modals import PROMPT
from lazyadb.messages import PromptSubmitted
from lazyadb.widgets import overlay, titled_panel


class PromptModal(Modal):
    """Collects a line of text and hands it to the modal that opened it."""

    component_id = PROMPT
    height_percent = 25

    def __init__(self, purpose: str, owner: str, title: str, placeholder: str = "") -> None:
        self._purpose = purpose
        self._owner = owner
        self._title = title
        self._placeholder = placeholder
        self._buffer = ""

    @property
    def text(self) -> str:
        return self._buffer

    def handle_key(self, key: str):
        if key in self.dismiss_keys:
            return [PopModal()]
        if key == "ENTER":
            return [PopModal(), SendTo(self._owner, PromptSubmitted(self._purpose, self._buffer))]
        if key == "BACKSPACE":
            self._buffer = self._buffer[:-1]
        elif key == "CTRL_U":
            self._buffer = ""
        elif len(key) == 1 and key.isprintable():
            self._buffer += key
        return []

    def key_hints(self) -> list[tuple[str, str]]:
        return [("Enter", "Submit"), ("Esc", "Cancel")]

    def render(self, ctx: RenderContext):
        line = Text("> ", style="green")
        if self._buffer:
            line.append(self._buffer)
        else:
            line.append(self._placeholder, style="dim")
        line.append("█", style="green")
        panel = titled_panel(self._title, Group(line), focused=True)
        return overlay(panel, ctx.width, ctx.height, self.width_percent, self.height_percent)
