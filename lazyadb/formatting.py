"""Shared text helpers for human-facing panes."""

from __future__ import annotations

from lazyadb.models import (
    CONNECTION_EMULATOR,
    CONNECTION_TCP,
    STATE_OFFLINE,
    STATE_ONLINE,
    STATE_UNAUTHORIZED,
    Device,
)

STATE_ICONS = {
    STATE_ONLINE: ("●", "green"),
    STATE_OFFLINE: ("○", "red"),
    STATE_UNAUTHORIZED: ("⚠", "yellow"),
}

CONNECTION_TAGS = {
    CONNECTION_TCP: "[TCP]",
    CONNECTION_EMULATOR: "[EMU]",
}

KEY_LABELS = {
    "ENTER": "Enter",
    "ESC": "Esc",
    "TAB": "Tab",
    "BACKTAB": "S-Tab",
    "UP": "↑",
    "DOWN": "↓",
    "CTRL_C": "^C",
    "CTRL_L": "^L",
}


def state_icon(state: str) -> tuple[str, str]:
    return STATE_ICONS.get(state, ("?", "bright_black"))


def connection_tag(connection: str) -> str:
    return CONNECTION_TAGS.get(connection, "[USB]")


def device_label(device: Device | None) -> str:
    if device is None:
        return "<none>"
    return f"{device.display_name()} ({device.serial})"


def key_label(key: str) -> str:
    return KEY_LABELS.get(key, key)


def keys_for_action(keymap: dict[str, str], action: str) -> list[str]:
    return [key for key, bound in keymap.items() if bound == action]


def hint(keymap: dict[str, str], action: str, label: str) -> tuple[str, str] | None:
    keys = keys_for_action(keymap, action)
    if not keys:
        return None
    return "/".join(key_label(k) for k in keys[:2]), label


def compact_relative_age(age_seconds: float | int | None) -> str:
    if age_seconds is None:
        return "n/a"

    seconds = max(0, int(age_seconds))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def tail_lines(text: str, limit: int) -> list[str]:
    lines = (text or "").rstrip("\n").splitlines()
    if limit <= 0:
        return []
    return lines[-limit:]
