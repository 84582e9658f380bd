"""rich building blocks shared by pane and modal renderers."""

from __future__ import annotations

from rich.align import Align
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

FOCUS_BORDER = "green"
IDLE_BORDER = "bright_black"

LEVEL_STYLE = {
    "info": "cyan",
    "success": "green",
    "warn": "yellow",
    "error": "red",
}


def border_for(focused: bool) -> str:
    return FOCUS_BORDER if focused else IDLE_BORDER


def style_for_level(level: str) -> str:
    return LEVEL_STYLE.get(level, "cyan")


def empty_panel(title: str, message: str, focused: bool = False) -> Panel:
    return Panel(Text(message, style="dim"), title=f"[bold]{title}[/bold]", border_style=border_for(focused))


def kv_table(rows: list[tuple[str, str]]) -> Table:
    table = Table(box=None, show_header=False, expand=True, pad_edge=False)
    table.add_column("key", style="bold", no_wrap=True)
    table.add_column("value", style="default", overflow="fold")
    for key, value in rows:
        table.add_row(key, value)
    return table


def selection_table(rows: list[Text], selected: int) -> Table:
    table = Table.grid(expand=True)
    table.add_column(overflow="ellipsis", no_wrap=True)
    for index, row in enumerate(rows):
        if index == selected:
            row = row.copy()
            row.stylize("bold reverse")
        table.add_row(row)
    return table


def titled_panel(title: str, body, focused: bool = False, border: str | None = None, subtitle: str | None = None) -> Panel:
    return Panel(
        body,
        title=f"[bold]{title}[/bold]",
        subtitle=subtitle,
        subtitle_align="right",
        border_style=border or border_for(focused),
    )


def overlay(panel: Panel, width: int, height: int, width_percent: int, height_percent: int):
    panel.width = max(20, width * width_percent // 100)
    panel.height = max(5, height * height_percent // 100)
    return Align.center(panel, vertical="middle")
