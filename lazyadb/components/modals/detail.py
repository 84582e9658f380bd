"""Device detail overlay: a summary of one device plus an action menu.

Operations started here report back to this modal only. Their outcome is
kept as display state of the modal; shell output is forwarded to the content
pane.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Group
from rich.text import Text

from lazyadb.commands import PushModal, SendTo, StartOperation
from lazyadb.components import Modal, RenderContext
from lazyadb.components.modals import DEVICE_DETAIL
from lazyadb.components.modals.prompt import PromptModal
from lazyadb.components.panes import CONTENT, DEVICES
from lazyadb.formatting import connection_tag, hint
from lazyadb.messages import DevicesUpdated, Message, OperationFinished, PromptSubmitted, RefreshRequested, ShowOutput
from lazyadb.models import CONNECTION_EMULATOR, CONNECTION_TCP, Device
from lazyadb.operations import OperationKind, OperationRequest, new_request
from lazyadb.widgets import kv_table, overlay, selection_table, style_for_level, titled_panel

PROMPT_SHELL = "shell"
PROMPT_INSTALL = "install"
PROMPT_UNINSTALL = "uninstall"

PROMPTS = {
    PROMPT_SHELL: ("Shell command", "e.g. pm list packages"),
    PROMPT_INSTALL: ("Install APK", "path to .apk on this machine"),
    PROMPT_UNINSTALL: ("Uninstall package", "e.g. com.example.app"),
}


@dataclass(frozen=True)
class MenuItem:
    label: str
    action: str
    mode: str = ""


def menu_for(device: Device) -> list[MenuItem]:
    items = [
        MenuItem("Reboot", "reboot"),
        MenuItem("Reboot to recovery", "reboot", "recovery"),
        MenuItem("Reboot to bootloader", "reboot", "bootloader"),
        MenuItem("Run shell command...", "prompt", PROMPT_SHELL),
        MenuItem("Install APK...", "prompt", PROMPT_INSTALL),
        MenuItem("Uninstall package...", "prompt", PROMPT_UNINSTALL),
    ]
    if device.connection == CONNECTION_EMULATOR:
        items.append(MenuItem("Kill emulator", "kill"))
    elif device.connection == CONNECTION_TCP:
        items.append(MenuItem("Disconnect", "disconnect"))
    return items


class DeviceDetailModal(Modal):
    component_id = DEVICE_DETAIL
    height_percent = 60

    def __init__(self, device: Device, keybindings: dict[str, dict[str, str]]) -> None:
        self._device = device
        self._keymap = keybindings.get("device_detail", {})
        self._menu = menu_for(device)
        self._selected = 0
        self._pending: dict[int, OperationRequest] = {}
        self._outcome: tuple[str, str] | None = None

    @property
    def device(self) -> Device:
        return self._device

    @property
    def outcome(self) -> tuple[str, str] | None:
        """Last (level, text) shown under the menu."""
        return self._outcome

    @property
    def pending_tokens(self) -> tuple[int, ...]:
        return tuple(self._pending)

    def _start(self, request: OperationRequest) -> list:
        self._pending[request.token] = request
        self._outcome = ("info", f"{request.describe()}...")
        return [StartOperation(request)]

    def _activate(self) -> list:
        item = self._menu[self._selected]
        serial = self._device.serial
        if item.action == "reboot":
            return self._start(new_request(OperationKind.REBOOT, serial, mode=item.mode))
        if item.action == "kill":
            return self._start(new_request(OperationKind.KILL_EMULATOR, serial))
        if item.action == "disconnect":
            return self._start(new_request(OperationKind.DISCONNECT, serial))
        if item.action == "prompt":
            title, placeholder = PROMPTS[item.mode]
            return [PushModal(PromptModal(item.mode, owner=self.component_id, title=title, placeholder=placeholder))]
        return []

    def _submitted(self, message: PromptSubmitted) -> list:
        text = message.text.strip()
        if not text:
            return []
        serial = self._device.serial
        if message.purpose == PROMPT_SHELL:
            return self._start(new_request(OperationKind.SHELL, serial, command=text))
        if message.purpose == PROMPT_INSTALL:
            return self._start(new_request(OperationKind.INSTALL, serial, apk_path=text))
        if message.purpose == PROMPT_UNINSTALL:
            return self._start(new_request(OperationKind.UNINSTALL, serial, package=text))
        return []

    def _finish(self, message: OperationFinished) -> list:
        result = message.result
        request = self._pending.pop(result.token, None)
        if request is None:
            return []
        if not result.ok:
            self._outcome = ("error", f"{request.describe()} failed: {result.error}")
            return []

        self._outcome = ("success", f"{request.describe()} done")
        if result.kind is OperationKind.SHELL:
            title = f"$ {request.param('command', '')} ({self._device.serial})"
            return [SendTo(CONTENT, ShowOutput(title, str(result.payload or "")))]
        if result.kind in (OperationKind.INSTALL, OperationKind.UNINSTALL):
            output = str(result.payload or "").strip()
            if output:
                self._outcome = ("success", output.splitlines()[-1])
            return []
        if result.kind in (OperationKind.DISCONNECT, OperationKind.KILL_EMULATOR, OperationKind.REBOOT):
            return [SendTo(DEVICES, RefreshRequested())]
        return []

    def handle(self, message: Message):
        if isinstance(message, OperationFinished):
            return self._finish(message)
        if isinstance(message, PromptSubmitted):
            return self._submitted(message)
        if isinstance(message, DevicesUpdated):
            for device in message.devices:
                if device.serial == self._device.serial:
                    self._device = device
            return []
        return super().handle(message)

    def handle_key(self, key: str):
        if key in self.dismiss_keys:
            return super().handle_key(key)
        action = self._keymap.get(key)
        if action == "down":
            self._selected = min(len(self._menu) - 1, self._selected + 1)
        elif action == "up":
            self._selected = max(0, self._selected - 1)
        elif action == "activate":
            return self._activate()
        return []

    def key_hints(self) -> list[tuple[str, str]]:
        hints = [h for h in (hint(self._keymap, "activate", "Run"),) if h]
        return [*hints, ("Esc", "Close")]

    def render(self, ctx: RenderContext):
        device = self._device
        summary = kv_table(
            [
                ("Serial", device.serial),
                ("Model", device.display_name()),
                ("State", device.state),
                ("Connection", connection_tag(device.connection)),
            ]
        )
        menu = selection_table([Text(item.label) for item in self._menu], self._selected)
        parts = [summary, Text(""), menu]
        if self._outcome is not None:
            level, text = self._outcome
            parts.extend([Text(""), Text(text, style=style_for_level(level))])
        panel = titled_panel(device.display_name(), Group(*parts), focused=True)
        return overlay(panel, ctx.width, ctx.height, self.width_percent, self.height_percent)
