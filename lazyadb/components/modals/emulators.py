"""Emulator (AVD) picker overlay."""

from __future__ import annotations

from rich.text import Text

from lazyadb.commands import Focus, PopModal, SendTo, StartOperation
from lazyadb.components import Modal, RenderContext
from lazyadb.components.modals import EMULATORS
from lazyadb.components.panes import CONTENT, DEVICES, STATUS
from lazyadb.formatting import hint
from lazyadb.messages import Message, Notice, OperationFinished, RefreshRequested, Tick
from lazyadb.models import Avd
from lazyadb.operations import OperationKind, new_request
from lazyadb.widgets import empty_panel, overlay, selection_table, titled_panel


class EmulatorsModal(Modal):
    """Lists AVDs; loads them on the first tick after it is pushed."""

    component_id = EMULATORS

    def __init__(self, keybindings: dict[str, dict[str, str]]) -> None:
        self._keymap = keybindings.get("emulators", {})
        self._avds: list[Avd] = []
        self._selected = 0
        self._loaded = False
        self._list_token: int | None = None
        self._action_tokens: dict[int, str] = {}
        self._error = ""

    @property
    def avds(self) -> tuple[Avd, ...]:
        return tuple(self._avds)

    def _load(self) -> list:
        if self._list_token is not None:
            return []
        request = new_request(OperationKind.LIST_AVDS)
        self._list_token = request.token
        return [StartOperation(request)]

    def _selected_avd(self) -> Avd | None:
        if not self._avds:
            return None
        return self._avds[self._selected]

    def _select(self) -> list:
        avd = self._selected_avd()
        if avd is None:
            return []
        if avd.is_running():
            return [PopModal(), Focus(CONTENT)]
        request = new_request(OperationKind.START_EMULATOR, avd.name)
        self._action_tokens[request.token] = avd.name
        return [SendTo(STATUS, Notice(f"starting {avd.display_name()}...")), StartOperation(request)]

    def _kill(self) -> list:
        avd = self._selected_avd()
        if avd is None or avd.running_serial is None:
            return []
        request = new_request(OperationKind.KILL_EMULATOR, avd.running_serial)
        self._action_tokens[request.token] = avd.name
        return [StartOperation(request)]

    def _finish(self, message: OperationFinished) -> list:
        result = message.result
        if result.token == self._list_token:
            self._list_token = None
            self._loaded = True
            if result.ok:
                self._avds = list(result.payload or [])
                self._selected = min(self._selected, max(0, len(self._avds) - 1))
                self._error = ""
            else:
                self._error = result.error
            return []

        name = self._action_tokens.pop(result.token, None)
        if name is None:
            return []
        if not result.ok:
            return [SendTo(STATUS, Notice(f"{name}: {result.error}", "error"))]
        verb = "started" if result.kind is OperationKind.START_EMULATOR else "stopped"
        self._loaded = False
        return [
            SendTo(STATUS, Notice(f"{name} {verb}", "success")),
            SendTo(DEVICES, RefreshRequested()),
        ]

    def handle(self, message: Message):
        if isinstance(message, Tick):
            if not self._loaded:
                return self._load()
            return []
        if isinstance(message, OperationFinished):
            return self._finish(message)
        return super().handle(message)

    def handle_key(self, key: str):
        if key in self.dismiss_keys:
            return [PopModal()]
        action = self._keymap.get(key)
        if action == "down" and self._avds:
            self._selected = min(len(self._avds) - 1, self._selected + 1)
        elif action == "up":
            self._selected = max(0, self._selected - 1)
        elif action == "select":
            return self._select()
        elif action == "kill":
            return self._kill()
        elif action == "refresh":
            return self._load()
        return []

    def key_hints(self) -> list[tuple[str, str]]:
        pairs = [("select", "Start/Open"), ("kill", "Kill"), ("refresh", "Reload")]
        hints = [h for h in (hint(self._keymap, action, label) for action, label in pairs) if h]
        return [*hints, ("Esc", "Close")]

    def render(self, ctx: RenderContext):
        if self._error:
            panel = empty_panel("Emulators", self._error, focused=True)
        elif not self._avds:
            panel = empty_panel("Emulators", "(no AVDs)" if self._loaded else "(loading)", focused=True)
        else:
            rows = []
            for avd in self._avds:
                row = Text()
                if avd.is_running():
                    row.append("▶ ", style="green")
                    row.append(f"{avd.display_name()} (running)")
                else:
                    row.append("■ ", style="bright_black")
                    row.append(avd.display_name())
                rows.append(row)
            panel = titled_panel("Emulators", selection_table(rows, self._selected), focused=True)
        return overlay(panel, ctx.width, ctx.height, self.width_percent, self.height_percent)
