"""Command-line entrypoint for the lazyadb dashboard."""

from __future__ import annotations

import argparse
import json
import subprocess
import sys
from datetime import datetime, timezone
from pathlib import Path

import structlog
from rich.console import Console

from lazyadb.bridge import first_line
from lazyadb.bridge.client import AdbClient
from lazyadb.components.panes import DEVICES, default_panes
from lazyadb.config import resolve_config
from lazyadb.errors import BridgeError, ConfigError
from lazyadb.events import TerminalEventSource, terminal_mode
from lazyadb.executor import OperationExecutor
from lazyadb.logs import configure_logging
from lazyadb.loop import Application
from lazyadb.screen import Screen

logger = structlog.get_logger()

LOG_LEVELS = ["debug", "info", "warning", "error"]


def _json_output(client: AdbClient) -> str:
    devices = client.devices()
    avds = client.avds_with_status(devices)
    payload = {
        "collected_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "adb": client.adb_path,
        "adb_version": first_line(client.version(), "unknown"),
        "devices": [device.to_dict() for device in devices],
        "avds": [avd.to_dict() for avd in avds],
    }
    return json.dumps(payload, indent=2)


def build_application(config: dict, client: AdbClient) -> Application:
    return Application(
        default_panes(config),
        lambda deliver: OperationExecutor(client, deliver),
        config["keybindings"],
        focus=DEVICES,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Terminal dashboard for adb devices and emulators")
    parser.add_argument("--json", action="store_true", help="Print one device/emulator snapshot as JSON and exit")
    parser.add_argument("--config", help="Optional JSON config file (refresh, keybindings)")
    parser.add_argument("--refresh", type=int, help="Device refresh interval seconds override")
    parser.add_argument("--adb", help="Path to the adb executable (default: $ADB or adb)")
    parser.add_argument("--log-file", help="Log file path")
    parser.add_argument("--log-level", default="info", choices=LOG_LEVELS, help="Log level")
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args.config, args.refresh)
    except ConfigError as exc:
        parser.error(str(exc))

    log_handle = configure_logging(Path(args.log_file) if args.log_file else None, args.log_level)
    client = AdbClient(adb_path=args.adb)
    logger.info("app_started", adb=client.adb_path, snapshot=args.json, refresh_seconds=config["refresh_seconds"])

    try:
        if args.json:
            try:
                print(_json_output(client))
            except FileNotFoundError:
                print(f"{client.adb_path} not found; is it installed and in PATH?", file=sys.stderr)
                return 1
            except (BridgeError, subprocess.TimeoutExpired) as exc:
                print(f"adb failed: {exc}", file=sys.stderr)
                return 1
            return 0

        app = build_application(config, client)
        source = TerminalEventSource(tick_seconds=config["tick_seconds"])
        with terminal_mode(sys.stdin.fileno()), Screen(Console()) as screen:
            app.run(source, screen)
        return 0
    except KeyboardInterrupt:
        return 0
    finally:
        log_handle.close()


if __name__ == "__main__":
    raise SystemExit(main())
