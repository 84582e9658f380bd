"""Message vocabulary delivered to components.

Messages are frozen values: they describe something that already happened and
are never mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lazyadb.models import Device
from lazyadb.operations import OperationResult


@dataclass(frozen=True)
class Message:
    pass


@dataclass(frozen=True)
class Tick(Message):
    now: float = 0.0


@dataclass(frozen=True)
class Resized(Message):
    width: int
    height: int


@dataclass(frozen=True)
class OperationFinished(Message):
    result: OperationResult


@dataclass(frozen=True)
class DevicesUpdated(Message):
    devices: tuple[Device, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DeviceSelected(Message):
    device: Device | None = None


@dataclass(frozen=True)
class Notice(Message):
    text: str
    level: str = "info"


@dataclass(frozen=True)
class ShowOutput(Message):
    title: str
    text: str


@dataclass(frozen=True)
class PromptSubmitted(Message):
    purpose: str
    text: str


@dataclass(frozen=True)
class DismissRequested(Message):
    pass


@dataclass(frozen=True)
class RefreshRequested(Message):
    pass
