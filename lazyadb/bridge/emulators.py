"""AVD listing and running-emulator matching."""

from __future__ import annotations

from lazyadb.models import Avd


def parse_avd_list(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


def merge_avds(avd_names: list[str], running: dict[str, str]) -> list[Avd]:
    """Combine known AVD names with running emulators.

    `running` maps emulator serial to AVD name. Running emulators whose AVD is
    not in the list (started outside the SDK directory) are appended.
    """
    by_name = {name: serial for serial, name in running.items()}
    avds = [Avd(name=name, running_serial=by_name.get(name)) for name in avd_names]
    known = set(avd_names)
    for serial, name in running.items():
        if name not in known:
            avds.append(Avd(name=name, running_serial=serial))
            known.add(name)
    return avds
