"""Frame composition and the live terminal screen."""

from __future__ import annotations

from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live

from lazyadb.components import REGION_FOOTER, REGION_HEADER, REGION_MAIN, REGION_SIDEBAR, RenderContext
from lazyadb.layout import FOOTER_HEIGHT, HEADER_HEIGHT, body_height, select_layout_mode, sidebar_ratio


def _stack(renderables: list):
    if len(renderables) == 1:
        return renderables[0]
    return Group(*renderables)


def build_frame(app, width: int, height: int) -> Layout:
    """Compose panes by region; an open modal takes over the body area."""
    mode = select_layout_mode(width)
    modal = app.top_modal
    hints = modal.key_hints() if modal is not None else (app.focused_pane.key_hints() if app.focused_pane else [])

    regions: dict[str, list] = {REGION_HEADER: [], REGION_SIDEBAR: [], REGION_MAIN: [], REGION_FOOTER: []}
    for pane in app.panes:
        if not pane.visible:
            continue
        ctx = RenderContext(
            focused=modal is None and pane.component_id == app.focused_pane_id,
            width=width,
            height=height,
            layout_mode=mode,
        )
        if pane.region == REGION_FOOTER:
            regions[REGION_FOOTER].append(pane.render(ctx, hints=hints))
        else:
            regions.setdefault(pane.region, []).append(pane.render(ctx))

    layout = Layout(name="root")
    layout.split_column(
        Layout(_stack(regions[REGION_HEADER] or [""]), name="header", size=HEADER_HEIGHT),
        Layout(name="body"),
        Layout(_stack(regions[REGION_FOOTER] or [""]), name="footer", size=FOOTER_HEIGHT),
    )

    if modal is not None:
        ctx = RenderContext(focused=True, width=width, height=body_height(height), layout_mode=mode)
        layout["body"].update(modal.render(ctx))
        return layout

    sidebar = _stack(regions[REGION_SIDEBAR] or [""])
    main = _stack(regions[REGION_MAIN] or [""])
    if mode == "narrow":
        layout["body"].split_column(
            Layout(sidebar, name="sidebar", ratio=1),
            Layout(main, name="main", ratio=2),
        )
    else:
        left, right = sidebar_ratio(mode)
        layout["body"].split_row(
            Layout(sidebar, name="sidebar", ratio=left),
            Layout(main, name="main", ratio=right),
        )
    return layout


class Screen:
    """Alternate-screen rich Live display redrawn on demand by the loop."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self._live: Live | None = None

    def __enter__(self) -> Screen:
        self._live = Live(console=self.console, screen=True, auto_refresh=False, redirect_stdout=False)
        self._live.__enter__()
        return self

    def __exit__(self, *exc_info) -> None:
        if self._live is not None:
            self._live.__exit__(*exc_info)
            self._live = None

    def update(self, app, force: bool = False) -> None:
        if self._live is None:
            return
        width, height = self.console.size
        if force:
            self.console.clear()
        self._live.update(build_frame(app, width, height), refresh=True)
