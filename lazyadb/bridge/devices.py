"""Parser for `adb devices -l` output."""

from __future__ import annotations

from lazyadb.models import (
    CONNECTION_EMULATOR,
    CONNECTION_TCP,
    CONNECTION_USB,
    Device,
)

DETAIL_FIELDS = {"model", "product", "transport_id"}


def connection_for_serial(serial: str) -> str:
    if serial.startswith("emulator-"):
        return CONNECTION_EMULATOR
    if ":" in serial:
        return CONNECTION_TCP
    return CONNECTION_USB


def parse_device_list(output: str) -> list[Device]:
    devices: list[Device] = []
    for raw in output.splitlines():
        line = raw.strip()
        if not line or line.startswith("List of") or line.startswith("*"):
            continue

        parts = line.split()
        if len(parts) < 2:
            continue
        serial, state = parts[0], parts[1]

        details: dict[str, str] = {}
        for token in parts[2:]:
            key, sep, value = token.partition(":")
            if sep and key in DETAIL_FIELDS:
                details[key] = value

        devices.append(
            Device(
                serial=serial,
                state=state,
                connection=connection_for_serial(serial),
                model=details.get("model"),
                product=details.get("product"),
                transport_id=details.get("transport_id"),
            )
        )
    return devices
