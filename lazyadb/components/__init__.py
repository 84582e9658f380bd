"""Component contract shared by panes and modals.

A component owns its state privately. The outside world reaches it only by
delivering messages (`handle`) or keys (`handle_key`), and it reaches the
outside world only through the commands it returns. Both calls must return
promptly: slow work is requested with a StartOperation command.
"""

from __future__ import annotations

from dataclasses import dataclass

from lazyadb.commands import Command, PopModal
from lazyadb.messages import DismissRequested, Message

REGION_HEADER = "header"
REGION_SIDEBAR = "sidebar"
REGION_MAIN = "main"
REGION_FOOTER = "footer"


@dataclass(frozen=True)
class RenderContext:
    focused: bool = False
    width: int = 80
    height: int = 24
    layout_mode: str = "medium"


class Component:
    component_id = "component"

    def handle(self, message: Message) -> list[Command]:
        return []

    def handle_key(self, key: str) -> list[Command]:
        return []

    def render(self, ctx: RenderContext):
        raise NotImplementedError

    def key_hints(self) -> list[tuple[str, str]]:
        return []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.component_id}>"


class Pane(Component):
    """Always-present component bound to a layout region."""

    region = REGION_MAIN
    focusable = True

    def __init__(self) -> None:
        self.visible = True


class Modal(Component):
    """Overlay component; while on top of the stack it receives every key.

    `passthrough_keys` lists the global keys the modal lets the dispatcher
    handle first (None: all of them); anything else reaches `handle_key`.
    """

    dismiss_keys: frozenset[str] = frozenset({"ESC"})
    passthrough_keys: frozenset[str] | None = None
    width_percent = 50
    height_percent = 50

    def handle(self, message: Message) -> list[Command]:
        if isinstance(message, DismissRequested):
            return [PopModal()]
        return []

    def handle_key(self, key: str) -> list[Command]:
        if key in self.dismiss_keys:
            return [PopModal()]
        return []
