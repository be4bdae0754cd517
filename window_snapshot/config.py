from __future__ import annotations

import json
import os
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, List

VERSION = "1.0.0"
APP_NAME = "Window Snapshot"
APPDATA_DIRNAME = "WindowSnapshot"
LOGGER_NAME = "WindowSnapshot"

DEFAULT_INITIAL_BUFFER_LENGTH = 256
DEFAULT_TITLE_BUFFER_LENGTH = 25565
DEFAULT_MAX_BUFFER_LENGTH = 1 << 20

_LOAD_WARNINGS: List[str] = []
_LOAD_WARNINGS_LOCK = threading.Lock()


def _push_load_warning(message: str) -> None:
    with _LOAD_WARNINGS_LOCK:
        _LOAD_WARNINGS.append(message)


def consume_load_warnings() -> List[str]:
    with _LOAD_WARNINGS_LOCK:
        out = list(_LOAD_WARNINGS)
        _LOAD_WARNINGS.clear()
        return out


def _app_data_root() -> Path:
    appdata = os.environ.get("APPDATA")
    if not appdata:
        appdata = str(Path.home() / "AppData" / "Roaming")
    return Path(appdata) / APPDATA_DIRNAME


def get_app_data_dir() -> str:
    path = _app_data_root()
    path.mkdir(parents=True, exist_ok=True)
    return str(path)


APPDATA_DIR = str(_app_data_root())
SETTINGS_FILE = os.path.join(APPDATA_DIR, "window_snapshot_settings.json")
LOG_FILE = os.path.join(APPDATA_DIR, "window_snapshot.log")


def _coerce_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _coerce_int(value: Any, default: int, minimum: int | None = None, maximum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        out = default
    else:
        out = value
    if minimum is not None:
        out = max(out, minimum)
    if maximum is not None:
        out = min(out, maximum)
    return out


def _coerce_str(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _load_json_object(path: str, label: str) -> dict[str, Any] | None:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        return None
    except Exception as exc:
        _push_load_warning(f"{label}: JSON parse failed ({exc.__class__.__name__}), using defaults")
        return None
    if not isinstance(raw, dict):
        _push_load_warning(f"{label}: top-level value is not an object, using defaults")
        return None
    return raw


@dataclass
class InspectorSettings:
    initial_buffer_length: int = DEFAULT_INITIAL_BUFFER_LENGTH
    title_buffer_length: int = DEFAULT_TITLE_BUFFER_LENGTH
    max_buffer_length: int = DEFAULT_MAX_BUFFER_LENGTH
    ignore_process_errors: bool = False
    log_level: str = "INFO"

    @classmethod
    def load(cls, path: str = SETTINGS_FILE) -> "InspectorSettings":
        defaults = cls()
        label = os.path.basename(path)
        raw = _load_json_object(path, label)
        if raw is None:
            return defaults

        initial = _coerce_int(raw.get("initial_buffer_length"), defaults.initial_buffer_length, minimum=16)
        title = _coerce_int(raw.get("title_buffer_length"), defaults.title_buffer_length, minimum=16)
        max_length = _coerce_int(
            raw.get("max_buffer_length"),
            defaults.max_buffer_length,
            minimum=256,
            maximum=1 << 26,
        )
        floor = max(initial, title)
        if max_length < floor:
            _push_load_warning(f"{label}: max_buffer_length raised to {floor} to fit the initial buffer lengths")
            max_length = floor

        return cls(
            initial_buffer_length=initial,
            title_buffer_length=title,
            max_buffer_length=max_length,
            ignore_process_errors=_coerce_bool(raw.get("ignore_process_errors"), defaults.ignore_process_errors),
            log_level=_coerce_str(raw.get("log_level"), defaults.log_level).upper(),
        )

    def save(self, path: str = SETTINGS_FILE) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f, indent=2, ensure_ascii=False)

    @classmethod
    def default_json(cls) -> str:
        return json.dumps(asdict(cls()), indent=2, ensure_ascii=False)


__all__ = [
    "VERSION",
    "APP_NAME",
    "APPDATA_DIRNAME",
    "APPDATA_DIR",
    "LOGGER_NAME",
    "SETTINGS_FILE",
    "LOG_FILE",
    "DEFAULT_INITIAL_BUFFER_LENGTH",
    "DEFAULT_TITLE_BUFFER_LENGTH",
    "DEFAULT_MAX_BUFFER_LENGTH",
    "InspectorSettings",
    "get_app_data_dir",
    "consume_load_warnings",
]
