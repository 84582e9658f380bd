"""Parsers for the shell commands behind the device info view."""

from __future__ import annotations

from dataclasses import dataclass

from lazyadb.models import BatteryInfo, ScreenInfo, UsageInfo, WifiInfo

KB_PER_GB = 1_048_576.0

BATTERY_STATUS = {
    3: "discharging",
    4: "not charging",
    5: "full",
}
PLUG_TYPES = {
    1: "AC",
    2: "USB",
    4: "Wireless",
}


@dataclass
class GetpropResult:
    model: str = ""
    android_version: str = ""
    api_level: str = ""
    abi: str = ""
    locale: str = ""


def _prop_line(line: str) -> tuple[str, str] | None:
    # [key]: [value]
    if not line.startswith("["):
        return None
    key, sep, rest = line[1:].partition("]:")
    if not sep:
        return None
    rest = rest.strip()
    if not (rest.startswith("[") and rest.endswith("]")):
        return None
    return key, rest[1:-1]


def parse_getprop(output: str) -> GetpropResult:
    result = GetpropResult()
    for raw in output.splitlines():
        parsed = _prop_line(raw.strip())
        if parsed is None:
            continue
        key, value = parsed
        if key == "ro.build.version.release":
            result.android_version = value
        elif key == "ro.build.version.sdk":
            result.api_level = value
        elif key == "ro.product.cpu.abi":
            result.abi = value
        elif key == "ro.product.model":
            result.model = value
        elif key in ("persist.sys.locale", "ro.product.locale") and not result.locale:
            result.locale = value
    return result


def _int_after(line: str, prefix: str) -> int | None:
    try:
        return int(line[len(prefix):].strip())
    except ValueError:
        return None


def parse_battery(output: str) -> BatteryInfo | None:
    level = status_code = plugged = None
    for raw in output.splitlines():
        line = raw.strip()
        if line.startswith("level:"):
            level = _int_after(line, "level:")
        elif line.startswith("status:"):
            status_code = _int_after(line, "status:")
        elif line.startswith("plugged:"):
            plugged = _int_after(line, "plugged:")

    if level is None:
        return None
    if status_code == 2:
        status = f"charging ({PLUG_TYPES.get(plugged or 0, 'USB')})"
    else:
        status = BATTERY_STATUS.get(status_code or 0, "unknown")
    return BatteryInfo(level=level, status=status)


def parse_storage(output: str) -> UsageInfo | None:
    # df /data: Filesystem 1K-blocks Used Available Use% Mounted on
    for line in output.splitlines()[1:]:
        parts = line.split()
        if len(parts) < 4:
            continue
        try:
            total_kb = float(parts[1])
            used_kb = float(parts[2])
        except ValueError:
            return None
        return UsageInfo(used_gb=used_kb / KB_PER_GB, total_gb=total_kb / KB_PER_GB)
    return None


def _kb_value(text: str) -> float | None:
    value = text.strip()
    if value.endswith("kB"):
        value = value[:-2].strip()
    try:
        return float(value)
    except ValueError:
        return None


def parse_ram(output: str) -> UsageInfo | None:
    total = available = None
    for line in output.splitlines():
        if line.startswith("MemTotal:"):
            total = _kb_value(line[len("MemTotal:"):])
        elif line.startswith("MemAvailable:"):
            available = _kb_value(line[len("MemAvailable:"):])
    if total is None or available is None:
        return None
    return UsageInfo(used_gb=(total - available) / KB_PER_GB, total_gb=total / KB_PER_GB)


def parse_screen_size(output: str) -> str | None:
    for line in output.splitlines():
        if line.startswith("Physical size:"):
            return line[len("Physical size:"):].strip().replace("x", "×")
    return None


def parse_screen_density(output: str) -> str | None:
    for line in output.splitlines():
        if line.startswith("Physical density:"):
            return f"{line[len('Physical density:'):].strip()}dpi"
    return None


def screen_info(size: str | None, density: str | None) -> ScreenInfo | None:
    if size is None:
        return None
    return ScreenInfo(resolution=size, density=density or "N/A")


def parse_wifi(output: str) -> WifiInfo:
    ssid = ip = None
    for raw in output.splitlines():
        line = raw.strip()
        if not line.startswith("mWifiInfo"):
            continue
        start = line.find("SSID: ")
        if start >= 0:
            value = line[start + 6:].split(",")[0].strip().strip('"')
            if value and value != "<unknown ssid>":
                ssid = value
        start = line.find("IP: ")
        if start >= 0:
            value = line[start + 4:].strip().lstrip("/").replace("/", ",").split(",")[0].strip()
            if value and value != "0.0.0.0":
                ip = value
        if ssid is not None:
            break
    return WifiInfo(ssid=ssid or "N/A", ip=ip or "N/A")
