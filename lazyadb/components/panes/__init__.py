"""Pane identities and the default pane set."""

from __future__ import annotations

HEADER = "header"
DEVICES = "devices"
CONTENT = "content"
STATUS = "status"


def default_panes(config: dict) -> list:
    from lazyadb.components.panes.content import ContentPane
    from lazyadb.components.panes.devices import DevicesPane
    from lazyadb.components.panes.header import HeaderPane
    from lazyadb.components.panes.status import StatusPane

    keybindings = config["keybindings"]
    return [
        HeaderPane(),
        DevicesPane(keybindings, refresh_seconds=config["refresh_seconds"]),
        ContentPane(keybindings),
        StatusPane(notice_seconds=config["notice_seconds"]),
    ]
