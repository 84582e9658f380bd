"""Input translation and message routing.

The dispatcher turns raw events and operation results into messages, picks
the component(s) that receive them and collects what they return. It never
executes commands: each delivery step yields a batch of (emitter, commands)
pairs in delivery order, handed to the interpreter once the step is over.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from lazyadb.commands import Command, Focus, Quit
from lazyadb.components import Component
from lazyadb.errors import RoutingError
from lazyadb.events import EndOfInput, Event, KeyPress, Resize, Tick
from lazyadb.messages import Message, OperationFinished, Resized
from lazyadb.messages import Tick as TickMessage
from lazyadb.operations import OperationResult

if TYPE_CHECKING:
    from lazyadb.loop import Application

logger = structlog.get_logger()

Batch = list[tuple[Component | None, list[Command]]]


class Dispatcher:
    def __init__(self, app: Application, keybindings: dict[str, dict[str, str]]) -> None:
        self._app = app
        self._global_keys = dict(keybindings.get("global", {}))
        self._navigation_keys = dict(keybindings.get("navigation", {}))

    # events

    def dispatch_event(self, event: Event) -> Batch:
        if isinstance(event, KeyPress):
            return self.dispatch_key(event.key)
        if isinstance(event, Tick):
            now = event.now if event.now is not None else self._app.clock()
            return self.broadcast(TickMessage(now))
        if isinstance(event, Resize):
            self._app.resized(event.width, event.height)
            return self.broadcast(Resized(event.width, event.height))
        if isinstance(event, EndOfInput):
            return [(None, [Quit()])]
        raise RoutingError(f"unknown event: {event!r}")

    def _global_action(self, key: str) -> str | None:
        action = self._global_keys.get(key)
        if action is None:
            return None
        modal = self._app.top_modal
        if modal is not None and modal.passthrough_keys is not None and key not in modal.passthrough_keys:
            return None
        return action

    def dispatch_key(self, key: str) -> Batch:
        action = self._global_action(key)
        if action == "quit":
            return [(None, [Quit()])]
        if action == "redraw":
            self._app.request_redraw()
            return []

        modal = self._app.top_modal
        if modal is not None:
            return [(modal, list(modal.handle_key(key)))]

        navigation = self._navigation_keys.get(key)
        if navigation in ("focus_next", "focus_prev"):
            target = self._cycle_focus(1 if navigation == "focus_next" else -1)
            if target is None:
                return []
            return [(None, [Focus(target)])]

        pane = self._app.focused_pane
        if pane is None:
            return []
        return [(pane, list(pane.handle_key(key)))]

    def _cycle_focus(self, step: int) -> str | None:
        candidates = [pane.component_id for pane in self._app.panes if pane.focusable and pane.visible]
        if not candidates:
            return None
        current = self._app.focused_pane_id
        if current not in candidates:
            return candidates[0]
        return candidates[(candidates.index(current) + step) % len(candidates)]

    # results

    def dispatch_result(self, result: OperationResult) -> Batch:
        owner = self._app.release_token(result.token)
        if owner is None:
            logger.warning(
                "operation_result_dropped",
                token=result.token,
                kind=result.kind.value,
                reason="unknown_token",
            )
            return []
        if not self._app.is_live(owner):
            logger.warning(
                "operation_result_dropped",
                token=result.token,
                kind=result.kind.value,
                owner=owner.component_id,
                reason="owner_gone",
            )
            return []
        return [(owner, list(owner.handle(OperationFinished(result))))]

    # messages

    def deliver(self, component: Component, message: Message) -> Batch:
        return [(component, list(component.handle(message)))]

    def broadcast(self, message: Message) -> Batch:
        batch: Batch = []
        for component in [*self._app.panes, *self._app.modals]:
            batch.append((component, list(component.handle(message))))
        return batch
