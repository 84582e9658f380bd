"""Bridge helpers for invoking the adb and emulator command-line tools."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from lazyadb.errors import BridgeError

DEFAULT_TIMEOUT = 15


def env_adb_path() -> str:
    return os.environ.get("ADB", "adb")


def resolve_emulator_path() -> str:
    sdk = os.environ.get("ANDROID_HOME") or os.environ.get("ANDROID_SDK_ROOT")
    if sdk:
        candidate = Path(sdk) / "emulator" / "emulator"
        if candidate.exists():
            return str(candidate)
    return "emulator"


def first_line(text: str, fallback: str) -> str:
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
    return lines[0] if lines else fallback


def run_tool(cmd: list[str], timeout: float = DEFAULT_TIMEOUT) -> str:
    """Run a bridge command and return its stdout.

    A missing executable surfaces as FileNotFoundError, a timeout as
    subprocess.TimeoutExpired; a non-zero exit becomes BridgeError carrying
    the first line of stderr.
    """
    proc = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )
    if proc.returncode != 0:
        label = " ".join(cmd[:3])
        raise BridgeError(first_line(proc.stderr or proc.stdout, f"'{label}' failed"))
    return proc.stdout
