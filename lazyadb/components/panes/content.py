"""Content pane: details of the selected device and the latest command output."""

from __future__ import annotations

from rich.console import Group
from rich.rule import Rule
from rich.text import Text

from lazyadb.commands import PushModal, Quit, StartOperation
from lazyadb.components import REGION_MAIN, Pane, RenderContext
from lazyadb.components.modals.help import HelpModal
from lazyadb.components.panes import CONTENT
from lazyadb.formatting import hint, tail_lines
from lazyadb.messages import DeviceSelected, Message, OperationFinished, ShowOutput
from lazyadb.models import Device, DeviceInfo
from lazyadb.operations import OperationKind, new_request
from lazyadb.widgets import kv_table, titled_panel


class ContentPane(Pane):
    component_id = CONTENT
    region = REGION_MAIN

    def __init__(self, keybindings: dict[str, dict[str, str]]) -> None:
        super().__init__()
        self._keybindings = keybindings
        self._keymap = keybindings.get("content", {})
        # Display copy of the devices pane's selection, refreshed by broadcast.
        self._device: Device | None = None
        self._info: DeviceInfo | None = None
        self._info_error = ""
        self._info_token: int | None = None
        self._output: tuple[str, str] | None = None

    @property
    def info(self) -> DeviceInfo | None:
        return self._info

    @property
    def output(self) -> tuple[str, str] | None:
        return self._output

    def _request_info(self) -> list:
        if self._device is None or not self._device.online:
            return []
        request = new_request(OperationKind.DEVICE_INFO, self._device.serial, device=self._device)
        self._info_token = request.token
        self._info_error = ""
        return [StartOperation(request)]

    def _select(self, device: Device | None) -> list:
        changed = device is None or self._device is None or device.serial != self._device.serial
        self._device = device
        if changed:
            self._info = None
        self._info_token = None
        self._info_error = ""
        return self._request_info()

    def _finish(self, message: OperationFinished) -> list:
        result = message.result
        # Results for a device that is no longer selected are superseded.
        if result.token != self._info_token:
            return []
        self._info_token = None
        if result.ok:
            self._info = result.payload
        else:
            self._info_error = result.error
        return []

    def handle(self, message: Message):
        if isinstance(message, DeviceSelected):
            return self._select(message.device)
        if isinstance(message, OperationFinished):
            return self._finish(message)
        if isinstance(message, ShowOutput):
            self._output = (message.title, message.text)
        return []

    def handle_key(self, key: str):
        action = self._keymap.get(key)
        if action == "refresh":
            if self._info_token is not None:
                return []
            return self._request_info()
        if action == "clear":
            self._output = None
            return []
        if action == "help":
            return [PushModal(HelpModal(self._keybindings))]
        if action == "quit":
            return [Quit()]
        return []

    def key_hints(self) -> list[tuple[str, str]]:
        pairs = [("refresh", "Reload info"), ("clear", "Clear output"), ("quit", "Quit")]
        return [h for h in (hint(self._keymap, action, label) for action, label in pairs) if h]

    def _info_body(self):
        if self._device is None:
            return Text("Select a device to begin", style="dim")
        if not self._device.online:
            return Text(f"{self._device.serial} is {self._device.state}", style="yellow")
        if self._info_error:
            return Text(f"Could not read device info: {self._info_error}", style="red")
        if self._info is None:
            return Text(f"Loading {self._device.display_name()}...", style="dim")
        return kv_table(self._info.rows())

    def render(self, ctx: RenderContext):
        parts = [self._info_body()]
        if self._output is not None:
            title, text = self._output
            parts.append(Rule(title, style="bright_black"))
            parts.append(Text("\n".join(tail_lines(text, max(3, ctx.height - 18)))))
        return titled_panel("Content", Group(*parts), focused=ctx.focused)
