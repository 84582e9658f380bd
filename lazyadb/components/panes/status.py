"""Footer pane: key hints plus the latest notice.

Notices expire after `notice_seconds`, measured with Tick messages.
"""

from __future__ import annotations

from rich.table import Table
from rich.text import Text

from lazyadb.components import REGION_FOOTER, Pane, RenderContext
from lazyadb.components.panes import STATUS
from lazyadb.messages import Message, Notice, Tick
from lazyadb.widgets import style_for_level


class StatusPane(Pane):
    component_id = STATUS
    region = REGION_FOOTER
    focusable = False

    def __init__(self, notice_seconds: float = 4) -> None:
        super().__init__()
        self._notice_seconds = notice_seconds
        self._now = 0.0
        self._notice: Notice | None = None
        self._expires_at = 0.0

    @property
    def notice(self) -> Notice | None:
        return self._notice

    def handle(self, message: Message):
        if isinstance(message, Notice):
            self._notice = message
            self._expires_at = self._now + self._notice_seconds
        elif isinstance(message, Tick):
            self._now = message.now
            if self._notice is not None and self._now >= self._expires_at:
                self._notice = None
        return []

    def render(self, ctx: RenderContext, hints: list[tuple[str, str]] | None = None):
        left = Text()
        for index, (key, label) in enumerate(hints or []):
            if index:
                left.append("  ")
            left.append(f" {key} ", style="reverse")
            left.append(f" {label}")

        right = Text("? help", style="bright_black")
        if self._notice is not None:
            right = Text(self._notice.text, style=style_for_level(self._notice.level))

        grid = Table.grid(expand=True)
        grid.add_column(ratio=3, no_wrap=True, overflow="ellipsis")
        grid.add_column(ratio=2, justify="right", no_wrap=True, overflow="ellipsis")
        grid.add_row(left, right)
        return grid
