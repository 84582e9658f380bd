"""Title bar pane."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lazyadb.components import REGION_HEADER, Pane, RenderContext
from lazyadb.components.panes import HEADER
from lazyadb.formatting import device_label
from lazyadb.messages import DevicesUpdated, DeviceSelected, Message

TITLE = "LazyADB"


class HeaderPane(Pane):
    component_id = HEADER
    region = REGION_HEADER
    focusable = False

    def __init__(self) -> None:
        super().__init__()
        # Display copies of what the devices pane announces.
        self._device_label = device_label(None)
        self._device_count = 0

    @property
    def device_label(self) -> str:
        return self._device_label

    def handle(self, message: Message):
        if isinstance(message, DeviceSelected):
            self._device_label = device_label(message.device)
        elif isinstance(message, DevicesUpdated):
            self._device_count = len(message.devices)
        return []

    def render(self, ctx: RenderContext):
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        grid.add_column(justify="right")
        grid.add_row(
            Text(TITLE, style="bold green"),
            Text(f"devices: {self._device_count}   device: {self._device_label}", style="bright_black"),
        )
        return Panel(grid, border_style="green", padding=(0, 1))
