"""Responsive layout selection by terminal width."""

from __future__ import annotations

HEADER_HEIGHT = 3
FOOTER_HEIGHT = 1


def select_layout_mode(width: int) -> str:
    if width < 100:
        return "narrow"
    if width < 160:
        return "medium"
    return "wide"


def sidebar_ratio(mode: str) -> tuple[int, int]:
    """(sidebar, main) split of the body row."""
    if mode == "wide":
        return 1, 3
    return 1, 2


def body_height(height: int) -> int:
    return max(1, height - HEADER_HEIGHT - FOOTER_HEIGHT)
