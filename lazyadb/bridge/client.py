"""adb / emulator client used by the operation executor.

Every method blocks on a subprocess and must only be called off the loop
thread.
"""

from __future__ import annotations

import subprocess

import structlog

from lazyadb.bridge import DEFAULT_TIMEOUT, env_adb_path, resolve_emulator_path, run_tool
from lazyadb.bridge.device_info import (
    parse_battery,
    parse_getprop,
    parse_ram,
    parse_screen_density,
    parse_screen_size,
    parse_storage,
    parse_wifi,
    screen_info,
)
from lazyadb.bridge.devices import parse_device_list
from lazyadb.bridge.emulators import merge_avds, parse_avd_list
from lazyadb.errors import BridgeError
from lazyadb.models import CONNECTION_EMULATOR, Device, DeviceInfo

logger = structlog.get_logger()

REBOOT_MODES = {"", "bootloader", "recovery"}
INSTALL_TIMEOUT = 300


def _or_na(value: str) -> str:
    return value if value else "N/A"


class AdbClient:
    def __init__(
        self,
        adb_path: str | None = None,
        emulator_path: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.adb_path = adb_path or env_adb_path()
        self.emulator_path = emulator_path or resolve_emulator_path()
        self.timeout = timeout

    def _adb(self, *args: str, timeout: float | None = None) -> str:
        return run_tool([self.adb_path, *args], timeout=timeout or self.timeout)

    def run_for_device(self, serial: str, *args: str, timeout: float | None = None) -> str:
        return self._adb("-s", serial, *args, timeout=timeout)

    def _optional(self, serial: str, *args: str) -> str | None:
        try:
            return self.run_for_device(serial, *args)
        except (BridgeError, subprocess.TimeoutExpired) as exc:
            logger.debug("device_probe_failed", serial=serial, args=list(args), error=str(exc))
            return None

    def version(self) -> str:
        return self._adb("version").strip()

    def devices(self) -> list[Device]:
        return parse_device_list(self._adb("devices", "-l"))

    def list_avds(self) -> list[str]:
        output = run_tool([self.emulator_path, "-list-avds"], timeout=self.timeout)
        return parse_avd_list(output)

    def avd_name(self, serial: str) -> str | None:
        output = self._optional(serial, "emu", "avd", "name")
        if not output:
            return None
        return output.splitlines()[0].strip() or None

    def avds_with_status(self, devices: list[Device] | None = None):
        if devices is None:
            devices = self.devices()
        try:
            names = self.list_avds()
        except (BridgeError, FileNotFoundError) as exc:
            logger.warning("avd_list_failed", error=str(exc))
            names = []

        running: dict[str, str] = {}
        for device in devices:
            if device.connection != CONNECTION_EMULATOR:
                continue
            name = self.avd_name(device.serial)
            if name:
                running[device.serial] = name
        return merge_avds(names, running)

    def start_emulator(self, avd_name: str) -> None:
        subprocess.Popen(
            [self.emulator_path, "-avd", avd_name],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )

    def kill_emulator(self, serial: str) -> str:
        return self.run_for_device(serial, "emu", "kill")

    def disconnect(self, serial: str) -> str:
        return self._adb("disconnect", serial)

    def reboot(self, serial: str, mode: str = "") -> str:
        if mode not in REBOOT_MODES:
            raise BridgeError(f"unknown reboot mode: {mode}")
        args = ["reboot", mode] if mode else ["reboot"]
        return self.run_for_device(serial, *args)

    def shell(self, serial: str, command: str) -> str:
        return self.run_for_device(serial, "shell", command)

    def install(self, serial: str, apk_path: str) -> str:
        return self.run_for_device(serial, "install", "-r", apk_path, timeout=INSTALL_TIMEOUT)

    def uninstall(self, serial: str, package: str) -> str:
        return self.run_for_device(serial, "uninstall", package)

    def fetch_device_info(self, device: Device) -> DeviceInfo:
        serial = device.serial
        props = parse_getprop(self._optional(serial, "shell", "getprop") or "")

        battery_out = self._optional(serial, "shell", "dumpsys", "battery")
        storage_out = self._optional(serial, "shell", "df", "/data")
        ram_out = self._optional(serial, "shell", "cat", "/proc/meminfo")
        size_out = self._optional(serial, "shell", "wm", "size")
        density_out = self._optional(serial, "shell", "wm", "density")
        wifi_out = self._optional(serial, "shell", "dumpsys", "wifi")

        return DeviceInfo(
            serial=serial,
            model=props.model or device.display_name(),
            android_version=_or_na(props.android_version),
            api_level=_or_na(props.api_level),
            state=device.state,
            connection=device.connection,
            abi=_or_na(props.abi),
            locale=_or_na(props.locale),
            battery=parse_battery(battery_out) if battery_out else None,
            storage=parse_storage(storage_out) if storage_out else None,
            ram=parse_ram(ram_out) if ram_out else None,
            screen=screen_info(
                parse_screen_size(size_out) if size_out else None,
                parse_screen_density(density_out) if density_out else None,
            ),
            wifi=parse_wifi(wifi_out) if wifi_out is not None else None,
        )
