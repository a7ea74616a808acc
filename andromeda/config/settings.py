"""Settings storage for application configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


SETTINGS_PATH = Path(
    os.environ.get(
        "ANDROMEDA_SETTINGS_PATH",
        Path.home() / ".config" / "andromeda" / "settings.json",
    )
)

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_RING_SIZE = 256
DEFAULT_RING_LINE_WIDTH = 10.0
DEFAULT_RING_SELECTED_SCALE = 1.5
DEFAULT_RING_ARC_GAP_DEGREES = 1.0

DEFAULT_SETTINGS: dict[str, Any] = {
    "ring_size": DEFAULT_RING_SIZE,
    "ring_line_width": DEFAULT_RING_LINE_WIDTH,
    "ring_selected_scale": DEFAULT_RING_SELECTED_SCALE,
    "ring_arc_gap_degrees": DEFAULT_RING_ARC_GAP_DEGREES,
    "no_user_interaction": False,
    "default_filesystem": "ext4",
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=dict)


settings_store = SettingsStore()


def load_settings() -> None:
    settings_store.values = dict(DEFAULT_SETTINGS)
    if not SETTINGS_PATH.exists():
        return
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return
    if isinstance(data, dict):
        settings_store.values.update(data)


def save_settings() -> None:
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(settings_store.values, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def get_setting(key: str, default: Any | None = None) -> Any:
    return settings_store.values.get(key, default)


def set_setting(key: str, value: Any) -> None:
    settings_store.values[key] = value
    save_settings()


def get_bool(key: str, default: bool = False) -> bool:
    return bool(get_setting(key, default))


def get_float(key: str, default: float = 0.0) -> float:
    try:
        return float(get_setting(key, default))
    except (TypeError, ValueError):
        return default


def get_int(key: str, default: int = 0) -> int:
    try:
        return int(get_setting(key, default))
    except (TypeError, ValueError):
        return default


load_settings()
