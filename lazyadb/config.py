"""Settings resolution and user config merging for the dashboard."""

from __future__ import annotations

import copy
import json
from pathlib import Path

from platformdirs import user_config_dir

from lazyadb.errors import ConfigError

APP_NAME = "lazyadb"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / "config.json"

DEFAULT_KEYBINDINGS: dict[str, dict[str, str]] = {
    "global": {
        "CTRL_C": "quit",
        "CTRL_L": "redraw",
    },
    "navigation": {
        "TAB": "focus_next",
        "BACKTAB": "focus_prev",
    },
    "devices": {
        "j": "down",
        "DOWN": "down",
        "k": "up",
        "UP": "up",
        "r": "refresh",
        "x": "disconnect",
        "e": "emulators",
        "ENTER": "details",
        "?": "help",
        "q": "quit",
    },
    "content": {
        "r": "refresh",
        "c": "clear",
        "?": "help",
        "q": "quit",
    },
    "emulators": {
        "j": "down",
        "DOWN": "down",
        "k": "up",
        "UP": "up",
        "ENTER": "select",
        "x": "kill",
        "r": "refresh",
    },
    "device_detail": {
        "j": "down",
        "DOWN": "down",
        "k": "up",
        "UP": "up",
        "ENTER": "activate",
    },
    "help": {},
}

DEFAULTS: dict = {
    "refresh_seconds": 2,
    "tick_seconds": 0.25,
    "notice_seconds": 4,
}


def load_user_config(path: str | None) -> dict:
    if path:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"config path not found: {config_path}")
    else:
        config_path = DEFAULT_CONFIG_PATH
        if not config_path.exists():
            return {}

    try:
        data = json.loads(config_path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON config: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("config must be a JSON object")
    return data


def merge_keybindings(overrides: object) -> dict[str, dict[str, str]]:
    merged = copy.deepcopy(DEFAULT_KEYBINDINGS)
    if overrides is None:
        return merged
    if not isinstance(overrides, dict):
        raise ConfigError("keybindings must be an object of sections")

    for section, bindings in overrides.items():
        if section not in merged:
            raise ConfigError(f"unknown keybinding section: {section}")
        if not isinstance(bindings, dict):
            raise ConfigError(f"keybindings.{section} must be an object")
        for key, action in bindings.items():
            if action is None:
                # null unbinds a default key
                merged[section].pop(str(key), None)
            else:
                merged[section][str(key)] = str(action)
    return merged


def resolve_config(config_path: str | None = None, refresh_override: int | None = None) -> dict:
    resolved = dict(DEFAULTS)
    user_config = load_user_config(config_path)

    if "refresh_seconds" in user_config:
        resolved["refresh_seconds"] = max(1, int(user_config["refresh_seconds"]))
    if "tick_seconds" in user_config:
        resolved["tick_seconds"] = min(1.0, max(0.05, float(user_config["tick_seconds"])))
    if "notice_seconds" in user_config:
        resolved["notice_seconds"] = max(1, int(user_config["notice_seconds"]))
    if refresh_override is not None:
        resolved["refresh_seconds"] = max(1, int(refresh_override))

    resolved["keybindings"] = merge_keybindings(user_config.get("keybindings"))
    return resolved
