"""Device list pane.

Sole owner of the device list and the current selection. Other components
learn about either only through the DevicesUpdated and DeviceSelected
broadcasts emitted here.
"""

from __future__ import annotations

from rich.text import Text

from lazyadb.commands import Broadcast, PushModal, Quit, SendTo, StartOperation
from lazyadb.components import REGION_SIDEBAR, Pane, RenderContext
from lazyadb.components.modals.detail import DeviceDetailModal
from lazyadb.components.modals.emulators import EmulatorsModal
from lazyadb.components.modals.help import HelpModal
from lazyadb.components.panes import DEVICES, STATUS
from lazyadb.formatting import compact_relative_age, connection_tag, hint, state_icon
from lazyadb.messages import (
    DevicesUpdated,
    DeviceSelected,
    Message,
    Notice,
    OperationFinished,
    RefreshRequested,
    Tick,
)
from lazyadb.models import CONNECTION_EMULATOR, CONNECTION_TCP, Device
from lazyadb.operations import OperationKind, new_request
from lazyadb.widgets import empty_panel, selection_table, titled_panel


def _selection_key(device: Device | None) -> tuple[str, str] | None:
    if device is None:
        return None
    return (device.serial, device.state)


class DevicesPane(Pane):
    component_id = DEVICES
    region = REGION_SIDEBAR

    def __init__(self, keybindings: dict[str, dict[str, str]], refresh_seconds: float = 2) -> None:
        super().__init__()
        self._keybindings = keybindings
        self._keymap = keybindings.get("devices", {})
        self._refresh_seconds = refresh_seconds
        self._devices: list[Device] = []
        self._selected = 0
        self._last_refresh: float | None = None
        self._refreshed_at: float | None = None
        self._now = 0.0
        self._refresh_token: int | None = None
        self._action_tokens: dict[int, str] = {}
        self._announced: tuple[str, str] | None = None
        self._last_error = ""

    @property
    def devices(self) -> tuple[Device, ...]:
        return tuple(self._devices)

    @property
    def selected_device(self) -> Device | None:
        if not self._devices:
            return None
        return self._devices[self._selected]

    def _start_refresh(self) -> list:
        if self._refresh_token is not None:
            return []
        request = new_request(OperationKind.LIST_DEVICES)
        self._refresh_token = request.token
        self._last_refresh = self._now
        return [StartOperation(request)]

    def _announce_selection(self) -> list:
        device = self.selected_device
        key = _selection_key(device)
        if key == self._announced:
            return []
        self._announced = key
        return [Broadcast(DeviceSelected(device))]

    def _move(self, delta: int) -> list:
        if not self._devices:
            return []
        self._selected = max(0, min(len(self._devices) - 1, self._selected + delta))
        return self._announce_selection()

    def _apply_devices(self, devices: list[Device]) -> list:
        current = self.selected_device
        self._devices = list(devices)
        self._refreshed_at = self._now
        self._last_error = ""
        if current is not None:
            for index, device in enumerate(self._devices):
                if device.serial == current.serial:
                    self._selected = index
                    break
        if self._devices:
            self._selected = min(self._selected, len(self._devices) - 1)
        else:
            self._selected = 0
        return [Broadcast(DevicesUpdated(tuple(self._devices))), *self._announce_selection()]

    def _disconnect_selected(self) -> list:
        device = self.selected_device
        if device is None:
            return []
        if device.connection == CONNECTION_EMULATOR:
            request = new_request(OperationKind.KILL_EMULATOR, device.serial)
        elif device.connection == CONNECTION_TCP:
            request = new_request(OperationKind.DISCONNECT, device.serial)
        else:
            return [SendTo(STATUS, Notice(f"{device.serial} is attached over USB", "warn"))]
        self._action_tokens[request.token] = device.serial
        return [
            SendTo(STATUS, Notice(f"{request.describe()}...")),
            StartOperation(request),
        ]

    def _finish(self, message: OperationFinished) -> list:
        result = message.result
        if result.token == self._refresh_token:
            self._refresh_token = None
            if result.ok:
                return self._apply_devices(list(result.payload or []))
            self._last_error = result.error
            return [SendTo(STATUS, Notice(f"device refresh failed: {result.error}", "error"))]

        serial = self._action_tokens.pop(result.token, None)
        if serial is None:
            return []
        if not result.ok:
            return [SendTo(STATUS, Notice(f"{result.kind.value} {serial} failed: {result.error}", "error"))]
        return [SendTo(STATUS, Notice(f"{result.kind.value} {serial} done", "success")), *self._start_refresh()]

    def handle(self, message: Message):
        if isinstance(message, Tick):
            self._now = message.now
            if self._last_refresh is None or message.now - self._last_refresh >= self._refresh_seconds:
                return self._start_refresh()
            return []
        if isinstance(message, RefreshRequested):
            return self._start_refresh()
        if isinstance(message, OperationFinished):
            return self._finish(message)
        return []

    def handle_key(self, key: str):
        action = self._keymap.get(key)
        if action == "down":
            return self._move(1)
        if action == "up":
            return self._move(-1)
        if action == "refresh":
            return self._start_refresh()
        if action == "disconnect":
            return self._disconnect_selected()
        if action == "emulators":
            return [PushModal(EmulatorsModal(self._keybindings))]
        if action == "details":
            device = self.selected_device
            if device is None:
                return []
            return [PushModal(DeviceDetailModal(device, self._keybindings))]
        if action == "help":
            return [PushModal(HelpModal(self._keybindings))]
        if action == "quit":
            return [Quit()]
        return []

    def key_hints(self) -> list[tuple[str, str]]:
        pairs = [
            ("down", "Next"),
            ("up", "Prev"),
            ("details", "Actions"),
            ("disconnect", "Disconnect"),
            ("emulators", "Emulators"),
            ("refresh", "Refresh"),
            ("quit", "Quit"),
        ]
        return [h for h in (hint(self._keymap, action, label) for action, label in pairs) if h]

    def render(self, ctx: RenderContext):
        title = f"Devices ({len(self._devices)})"
        if not self._devices:
            message = self._last_error or ("(loading)" if self._last_refresh is None else "(no devices)")
            return empty_panel(title, message, focused=ctx.focused)

        rows = []
        for device in self._devices:
            icon, color = state_icon(device.state)
            row = Text()
            row.append(icon, style=color)
            row.append(f" {device.display_name()}")
            row.append(f" {connection_tag(device.connection)}", style="bright_black")
            rows.append(row)
        age = None if self._refreshed_at is None else self._now - self._refreshed_at
        subtitle = f"[bright_black]updated {compact_relative_age(age)}[/bright_black]"
        return titled_panel(title, selection_table(rows, self._selected), focused=ctx.focused, subtitle=subtitle)
