"""Operation requests, results, and the correlation token counter.

A token is drawn when a request is built and is the only link between a
fired-off operation and its completion. Tokens are never reused for the life
of the process.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any


class OperationKind(str, Enum):
    LIST_DEVICES = "list_devices"
    LIST_AVDS = "list_avds"
    DEVICE_INFO = "device_info"
    SHELL = "shell"
    INSTALL = "install"
    UNINSTALL = "uninstall"
    REBOOT = "reboot"
    DISCONNECT = "disconnect"
    START_EMULATOR = "start_emulator"
    KILL_EMULATOR = "kill_emulator"


class TokenCounter:
    """Monotonic, thread-safe token source."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)


_TOKENS = TokenCounter()


def next_token() -> int:
    return _TOKENS.next()


def freeze(value: Any) -> Any:
    """Hashable, read-only copy of `value`: lists become tuples, dicts sorted pairs."""
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    if isinstance(value, dict):
        return tuple(sorted((str(key), freeze(item)) for key, item in value.items()))
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(item) for item in value)
    return value


@dataclass(frozen=True)
class OperationRequest:
    kind: OperationKind
    target: str | None
    params: tuple[tuple[str, Any], ...] = ()
    token: int = 0

    def param(self, name: str, default: Any = None) -> Any:
        for key, value in self.params:
            if key == name:
                return value
        return default

    def describe(self) -> str:
        label = self.kind.value.replace("_", " ")
        return f"{label} {self.target}" if self.target else label


def new_request(kind: OperationKind, target: str | None = None, **params: Any) -> OperationRequest:
    return OperationRequest(kind=kind, target=target, params=freeze(params), token=next_token())


@dataclass(frozen=True)
class OperationResult:
    token: int
    kind: OperationKind
    target: str | None
    ok: bool
    payload: Any = None
    error: str = ""

    @classmethod
    def success(cls, request: OperationRequest, payload: Any = None) -> OperationResult:
        return cls(
            token=request.token,
            kind=request.kind,
            target=request.target,
            ok=True,
            payload=freeze(payload),
        )

    @classmethod
    def failure(cls, request: OperationRequest, error: str) -> OperationResult:
        return cls(
            token=request.token,
            kind=request.kind,
            target=request.target,
            ok=False,
            error=error or "operation failed",
        )
