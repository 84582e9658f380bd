"""Terminal key decoding.

Reads raw bytes from a file descriptor and turns them into key tokens:
printable characters as themselves, everything else as an upper-case name
("ENTER", "ESC", "UP", "CTRL_C", ...).
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25

CONTROL_KEYS = {
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\x0c": "CTRL_L",
    b"\x15": "CTRL_U",
    b"\t": "TAB",
    b"\r": "ENTER",
    b"\n": "ENTER",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
}

CSI_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"Z": "BACKTAB",
}

TILDE_KEYS = {
    b"3": "DELETE",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
}


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


class KeyReader:
    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._pending: list[bytes] = []

    def _read_ready_byte(self, timeout_ms: int) -> bytes | None:
        if self._pending:
            return self._pending.pop(0)
        ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
        ch = os.read(self.fd, 1)
        if not ch:
            return None
        return ch

    def read_key(self, timeout_ms: int | None = None) -> str:
        """Return the next key token, or "" when nothing arrived in time.

        Raises EOFError once the descriptor reports readable but has no data
        left.
        """
        if self._pending:
            ch = self._pending.pop(0)
        else:
            if timeout_ms is not None:
                ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
                if not ready:
                    return ""
            ch = os.read(self.fd, 1)
            if not ch:
                if timeout_ms is not None:
                    raise EOFError
                return ""

        if ch in CONTROL_KEYS:
            return CONTROL_KEYS[ch]
        if ch == b"\x1b":
            return self._escape_sequence()

        needed = _utf8_length(ch[0]) - 1
        data = ch
        for _ in range(needed):
            more = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if more is None:
                break
            data += more
        return data.decode("utf-8", errors="replace")

    def _escape_sequence(self) -> str:
        seq = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return "ESC"
        if seq not in {b"[", b"O"}:
            self._pending.append(seq)
            return "ESC"
        seq = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return "ESC"
        if seq in CSI_KEYS:
            return CSI_KEYS[seq]
        if seq in TILDE_KEYS:
            tail = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if tail == b"~":
                return TILDE_KEYS[seq]
        return "ESC"
