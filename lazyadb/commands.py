"""Command vocabulary returned by components.

Commands are data. Only the interpreter performs the effect a command names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lazyadb.messages import Message
from lazyadb.operations import OperationRequest

if TYPE_CHECKING:
    from lazyadb.components import Modal


@dataclass(frozen=True)
class Command:
    pass


@dataclass(frozen=True)
class StartOperation(Command):
    request: OperationRequest


@dataclass(frozen=True)
class SendTo(Command):
    target: str
    message: Message


@dataclass(frozen=True)
class Broadcast(Command):
    message: Message


@dataclass(frozen=True, eq=False)
class PushModal(Command):
    modal: Modal


@dataclass(frozen=True)
class PopModal(Command):
    pass


@dataclass(frozen=True)
class Focus(Command):
    pane_id: str


@dataclass(frozen=True)
class Quit(Command):
    pass
