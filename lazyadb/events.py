"""Event sources feeding the application loop.

An event source is any iterable of Event values. The terminal source reads
keys from stdin, watches the terminal size and emits ticks; the scripted
source replays a fixed list and then reports EndOfInput.
"""

from __future__ import annotations

import shutil
import sys
import threading
import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from lazyadb.keys import KeyReader

logger = structlog.get_logger()


@dataclass(frozen=True)
class Event:
    pass


@dataclass(frozen=True)
class KeyPress(Event):
    key: str


@dataclass(frozen=True)
class Resize(Event):
    width: int
    height: int


@dataclass(frozen=True)
class Tick(Event):
    now: float | None = None


@dataclass(frozen=True)
class EndOfInput(Event):
    pass


@contextmanager
def terminal_mode(fd: int):
    """Non-canonical, no-echo input with signals off, restored on exit.

    Leaves output processing alone so rich's alternate screen still renders
    correctly. Does nothing when `fd` is not a terminal.
    """
    try:
        import termios
    except ImportError:
        yield False
        return

    try:
        saved = termios.tcgetattr(fd)
    except termios.error:
        yield False
        return

    updated = termios.tcgetattr(fd)
    updated[3] &= ~(termios.ICANON | termios.ECHO | termios.ISIG)
    updated[6][termios.VMIN] = 0
    updated[6][termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSADRAIN, updated)
    try:
        yield True
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def terminal_size() -> tuple[int, int]:
    size = shutil.get_terminal_size()
    return size.columns, size.lines


class TerminalEventSource:
    def __init__(self, fd: int | None = None, tick_seconds: float = 0.25, clock=time.monotonic) -> None:
        self._reader = KeyReader(sys.stdin.fileno() if fd is None else fd)
        self._tick_seconds = tick_seconds
        self._clock = clock
        self._stopped = threading.Event()

    def stop(self) -> None:
        self._stopped.set()

    def __iter__(self) -> Iterator[Event]:
        size = terminal_size()
        last_tick = self._clock()
        yield Tick()
        timeout_ms = max(1, int(self._tick_seconds * 1000))
        while not self._stopped.is_set():
            try:
                key = self._reader.read_key(timeout_ms=timeout_ms)
            except EOFError:
                logger.info("input_closed")
                yield EndOfInput()
                return
            if key:
                yield KeyPress(key)

            current = terminal_size()
            if current != size:
                size = current
                yield Resize(*current)

            now = self._clock()
            if now - last_tick >= self._tick_seconds:
                last_tick = now
                yield Tick()


class ScriptedEventSource:
    """Replays `events`, then EndOfInput."""

    def __init__(self, events: Iterable[Event]) -> None:
        self._events = list(events)

    def stop(self) -> None:
        pass

    def __iter__(self) -> Iterator[Event]:
        yield from self._events
        yield EndOfInput()
