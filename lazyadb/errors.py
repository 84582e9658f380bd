"""Exception types shared across the dashboard."""

from __future__ import annotations


class LazyAdbError(Exception):
    """Base class for dashboard errors."""


class BridgeError(LazyAdbError):
    """An adb/emulator invocation ran but reported failure."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class RoutingError(LazyAdbError):
    """Internal consistency failure: a command named something that does not exist.

    Never caused by user input. The loop logs it and lets it propagate.
    """


class ConfigError(LazyAdbError, ValueError):
    """Config file missing, unreadable, or structurally invalid."""
