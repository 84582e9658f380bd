"""Command interpreter: the only place component commands take effect."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from lazyadb.commands import Broadcast, Focus, PopModal, PushModal, Quit, SendTo, StartOperation
from lazyadb.errors import RoutingError

if TYPE_CHECKING:
    from lazyadb.dispatcher import Batch
    from lazyadb.loop import Application

logger = structlog.get_logger()


class CommandInterpreter:
    def __init__(self, app: Application, executor) -> None:
        self._app = app
        self._executor = executor

    def execute(self, batch: Batch) -> bool:
        """Run every command of `batch` in order. Returns True once Quit ran."""
        for owner, commands in batch:
            for command in commands:
                if isinstance(command, Quit):
                    self._app.quit()
                    return True
                self._execute_one(owner, command)
        return False

    def _execute_one(self, owner, command) -> None:
        app = self._app
        if isinstance(command, StartOperation):
            if owner is None:
                raise RoutingError(f"{command.request.describe()} has no owning component")
            request = command.request
            app.register_token(request.token, owner)
            logger.debug(
                "operation_started",
                token=request.token,
                kind=request.kind.value,
                target=request.target,
                owner=owner.component_id,
            )
            self._executor.submit(request)
        elif isinstance(command, SendTo):
            target = app.find(command.target)
            if target is None:
                raise RoutingError(f"no component with id {command.target!r}")
            app.defer(target, command.message)
        elif isinstance(command, Broadcast):
            app.defer(None, command.message)
        elif isinstance(command, PushModal):
            app.push_modal(command.modal)
        elif isinstance(command, PopModal):
            app.pop_modal()
        elif isinstance(command, Focus):
            app.set_focus(command.pane_id)
        else:
            raise RoutingError(f"unknown command: {command!r}")
