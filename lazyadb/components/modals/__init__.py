"""Modal identities."""

from __future__ import annotations

HELP = "help"
EMULATORS = "emulators"
DEVICE_DETAIL = "device-detail"
PROMPT = "prompt"
