"""Application loop.

The loop is the single mutation authority: it owns the pane list, the modal
stack, the focused pane id and the token table, and it is the only thread
that calls into components. Events and operation results reach it through
one thread-safe intake queue; SendTo and Broadcast deliveries wait in a
private deferred queue and are handled before the intake on later steps.
"""

from __future__ import annotations

import queue
import threading
import time
from collections import deque
from collections.abc import Callable, Iterable
from enum import Enum

import structlog

from lazyadb.components import Component, Modal, Pane
from lazyadb.dispatcher import Batch, Dispatcher
from lazyadb.errors import RoutingError
from lazyadb.events import EndOfInput, Event
from lazyadb.interpreter import CommandInterpreter
from lazyadb.messages import Message
from lazyadb.operations import OperationResult

logger = structlog.get_logger()


class LoopState(str, Enum):
    RUNNING = "running"
    QUITTING = "quitting"


class Application:
    def __init__(
        self,
        panes: Iterable[Pane],
        executor_factory: Callable[[Callable[[OperationResult], None]], object],
        keybindings: dict[str, dict[str, str]],
        clock: Callable[[], float] = time.monotonic,
        focus: str | None = None,
    ) -> None:
        self._panes: list[Pane] = list(panes)
        ids = [pane.component_id for pane in self._panes]
        if len(set(ids)) != len(ids):
            raise RoutingError(f"duplicate pane ids: {ids}")

        self._modals: list[Modal] = []
        self._tokens: dict[int, Component] = {}
        self._deferred: deque[tuple[Component | None, Message]] = deque()
        self._intake: queue.Queue = queue.Queue()
        self._focus: str | None = None
        self.state = LoopState.RUNNING
        self.clock = clock
        self.size = (80, 24)
        self.dirty = True
        self.force_redraw = False

        self.dispatcher = Dispatcher(self, keybindings)
        self.executor = executor_factory(self.post_result)
        self.interpreter = CommandInterpreter(self, self.executor)

        if focus is not None:
            self.set_focus(focus)
        else:
            self._focus = next((pane.component_id for pane in self._panes if pane.focusable), None)

    # structure, read side

    @property
    def panes(self) -> tuple[Pane, ...]:
        return tuple(self._panes)

    @property
    def modals(self) -> tuple[Modal, ...]:
        """Modal stack, bottom first."""
        return tuple(self._modals)

    @property
    def top_modal(self) -> Modal | None:
        return self._modals[-1] if self._modals else None

    @property
    def focused_pane_id(self) -> str | None:
        return self._focus

    @property
    def focused_pane(self) -> Pane | None:
        return self.pane(self._focus) if self._focus is not None else None

    @property
    def pending_tokens(self) -> tuple[int, ...]:
        return tuple(self._tokens)

    def pane(self, pane_id: str) -> Pane | None:
        for pane in self._panes:
            if pane.component_id == pane_id:
                return pane
        return None

    def find(self, component_id: str) -> Component | None:
        """Pane or modal with this id; for modals the topmost match wins."""
        pane = self.pane(component_id)
        if pane is not None:
            return pane
        for modal in reversed(self._modals):
            if modal.component_id == component_id:
                return modal
        return None

    def is_live(self, component: Component) -> bool:
        return any(live is component for live in [*self._panes, *self._modals])

    # structure, write side (interpreter only)

    def register_token(self, token: int, owner: Component) -> None:
        self._tokens[token] = owner

    def release_token(self, token: int) -> Component | None:
        return self._tokens.pop(token, None)

    def defer(self, target: Component | None, message: Message) -> None:
        """Queue `message` for `target`, or for everyone when `target` is None."""
        self._deferred.append((target, message))

    def push_modal(self, modal: Modal) -> None:
        self._modals.append(modal)
        self.dirty = True
        logger.debug("modal_pushed", modal=modal.component_id, depth=len(self._modals))

    def pop_modal(self) -> Modal:
        if not self._modals:
            raise RoutingError("pop requested with an empty modal stack")
        modal = self._modals.pop()
        self.dirty = True
        logger.debug("modal_popped", modal=modal.component_id, depth=len(self._modals))
        return modal

    def set_focus(self, pane_id: str) -> None:
        pane = self.pane(pane_id)
        if pane is None:
            raise RoutingError(f"no pane with id {pane_id!r}")
        if not pane.focusable:
            raise RoutingError(f"pane {pane_id!r} cannot take focus")
        self._focus = pane_id
        self.dirty = True

    def quit(self) -> None:
        logger.info("loop_quitting", pending_operations=len(self._tokens), modals=len(self._modals))
        self.state = LoopState.QUITTING
        self._tokens.clear()
        self._deferred.clear()

    def resized(self, width: int, height: int) -> None:
        self.size = (width, height)
        self.dirty = True

    def request_redraw(self) -> None:
        self.force_redraw = True
        self.dirty = True

    # intake

    def post_event(self, event: Event) -> None:
        self._intake.put(event)

    def post_result(self, result: OperationResult) -> None:
        """Thread-safe; called from executor worker threads."""
        self._intake.put(result)

    # stepping

    def _deliver_deferred(self, target: Component | None, message: Message) -> Batch:
        if target is None:
            return self.dispatcher.broadcast(message)
        if not self.is_live(target):
            logger.warning("message_dropped", target=target.component_id, message=type(message).__name__)
            return []
        return self.dispatcher.deliver(target, message)

    def step(self, timeout: float | None = None) -> bool:
        """Process one deferred delivery or one intake item.

        `timeout=0` never blocks; None blocks until something arrives.
        Returns False when nothing was processed or the loop is quitting.
        """
        if self.state is LoopState.QUITTING:
            return False

        if self._deferred:
            target, message = self._deferred.popleft()
            batch = self._deliver_deferred(target, message)
        else:
            try:
                if timeout == 0:
                    item = self._intake.get_nowait()
                else:
                    item = self._intake.get(timeout=timeout)
            except queue.Empty:
                return False
            if isinstance(item, OperationResult):
                batch = self.dispatcher.dispatch_result(item)
            else:
                batch = self.dispatcher.dispatch_event(item)

        self.dirty = True
        self.interpreter.execute(batch)
        return True

    def run_pending(self) -> int:
        """Process everything already queued without blocking."""
        count = 0
        while self.step(timeout=0):
            count += 1
        return count

    def _pump(self, source) -> None:
        try:
            for event in source:
                if self.state is LoopState.QUITTING:
                    break
                self.post_event(event)
        except Exception:
            logger.exception("event_source_failed")
            self.post_event(EndOfInput())

    def run(self, source, screen=None) -> None:
        """Run until Quit, feeding events from `source` on a pump thread."""
        pump = threading.Thread(target=self._pump, args=(source,), name="lazyadb-events", daemon=True)
        pump.start()
        logger.info("loop_started", panes=[pane.component_id for pane in self._panes], focus=self._focus)
        try:
            self._render(screen)
            while self.state is LoopState.RUNNING:
                self.step(timeout=None)
                if not self._deferred:
                    self._render(screen)
        except RoutingError:
            logger.exception("routing_invariant_violated")
            raise
        finally:
            source.stop()
            self.executor.shutdown()
            logger.info("loop_stopped", state=self.state.value)

    def _render(self, screen) -> None:
        if screen is None or not self.dirty:
            return
        screen.update(self, force=self.force_redraw)
        self.dirty = False
        self.force_redraw = False
