"""Device records produced by the bridge and carried inside messages."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

STATE_ONLINE = "device"
STATE_OFFLINE = "offline"
STATE_UNAUTHORIZED = "unauthorized"

CONNECTION_USB = "usb"
CONNECTION_TCP = "tcp"
CONNECTION_EMULATOR = "emulator"


@dataclass(frozen=True)
class Device:
    serial: str
    state: str
    connection: str = CONNECTION_USB
    model: str | None = None
    product: str | None = None
    transport_id: str | None = None

    @property
    def online(self) -> bool:
        return self.state == STATE_ONLINE

    def display_name(self) -> str:
        if self.model:
            return self.model.replace("_", " ")
        return self.serial

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["display_name"] = self.display_name()
        return payload


@dataclass(frozen=True)
class Avd:
    name: str
    running_serial: str | None = None

    def is_running(self) -> bool:
        return self.running_serial is not None

    def display_name(self) -> str:
        return self.name.replace("_", " ")

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "running_serial": self.running_serial}


@dataclass(frozen=True)
class BatteryInfo:
    level: int
    status: str

    def __str__(self) -> str:
        return f"{self.level}% ({self.status})"


@dataclass(frozen=True)
class UsageInfo:
    """Used/total pair in GB, shared by storage and RAM."""

    used_gb: float
    total_gb: float

    def __str__(self) -> str:
        return f"{self.used_gb:.1f}/{self.total_gb:.1f} GB"


@dataclass(frozen=True)
class ScreenInfo:
    resolution: str
    density: str


@dataclass(frozen=True)
class WifiInfo:
    ssid: str
    ip: str


@dataclass(frozen=True)
class DeviceInfo:
    serial: str
    model: str
    android_version: str
    api_level: str
    state: str
    connection: str
    abi: str
    locale: str
    battery: BatteryInfo | None = None
    storage: UsageInfo | None = None
    ram: UsageInfo | None = None
    screen: ScreenInfo | None = None
    wifi: WifiInfo | None = None

    def rows(self) -> list[tuple[str, str]]:
        rows = [
            ("Serial", self.serial),
            ("Model", self.model),
            ("Android", f"{self.android_version} (API {self.api_level})"),
            ("State", self.state),
            ("Connection", self.connection),
            ("ABI", self.abi),
            ("Locale", self.locale),
            ("Battery", str(self.battery) if self.battery else "N/A"),
            ("Storage", str(self.storage) if self.storage else "N/A"),
            ("RAM", str(self.ram) if self.ram else "N/A"),
        ]
        if self.screen:
            rows.append(("Screen", f"{self.screen.resolution} @ {self.screen.density}"))
        else:
            rows.append(("Screen", "N/A"))
        if self.wifi:
            rows.append(("Wi-Fi", f"{self.wifi.ssid} ({self.wifi.ip})"))
        else:
            rows.append(("Wi-Fi", "N/A"))
        return rows

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
