from __future__ import annotations

from importlib import import_module
from typing import Dict, Tuple

_MODULE_EXPORTS = {
    "inspector": "window_snapshot.inspector",
}

_ATTR_EXPORTS: Dict[str, Tuple[str, str]] = {
    "VERSION": ("window_snapshot.config", "VERSION"),
    "APP_NAME": ("window_snapshot.config", "APP_NAME"),
    "APPDATA_DIR": ("window_snapshot.config", "APPDATA_DIR"),
    "SETTINGS_FILE": ("window_snapshot.config", "SETTINGS_FILE"),
    "LOG_FILE": ("window_snapshot.config", "LOG_FILE"),
    "InspectorSettings": ("window_snapshot.config", "InspectorSettings"),
    "get_app_data_dir": ("window_snapshot.config", "get_app_data_dir"),
    "consume_load_warnings": ("window_snapshot.config", "consume_load_warnings"),
    "WindowSnapshotError": ("window_snapshot.errors", "WindowSnapshotError"),
    "NativeCallError": ("window_snapshot.errors", "NativeCallError"),
    "InsufficientBuffer": ("window_snapshot.errors", "InsufficientBuffer"),
    "BufferTooLarge": ("window_snapshot.errors", "BufferTooLarge"),
    "read_native_string": ("window_snapshot.buffer_reader", "read_native_string"),
    "DriveMap": ("window_snapshot.drive_map", "DriveMap"),
    "resolve_drive_map": ("window_snapshot.drive_map", "resolve_drive_map"),
    "LookupContext": ("window_snapshot.context", "LookupContext"),
    "ProcessPathCache": ("window_snapshot.context", "ProcessPathCache"),
    "resolve_path": ("window_snapshot.process_path", "resolve_path"),
    "WindowField": ("window_snapshot.window", "WindowField"),
    "WindowRecord": ("window_snapshot.window", "WindowRecord"),
    "ALL_FIELDS": ("window_snapshot.window", "ALL_FIELDS"),
    "fill_fields": ("window_snapshot.window", "fill_fields"),
    "WindowInspector": ("window_snapshot.inspector", "WindowInspector"),
    "AsyncWin32": ("window_snapshot.native", "AsyncWin32"),
    "Win32API": ("window_snapshot.win32_api", "Win32API"),
    "PROCESS_QUERY_LIMITED_INFORMATION": ("window_snapshot.win32_api", "PROCESS_QUERY_LIMITED_INFORMATION"),
    "setup_logging": ("window_snapshot.logging_setup", "setup_logging"),
}

__all__ = ["inspector", *_ATTR_EXPORTS]


def __getattr__(name: str):
    module_name = _MODULE_EXPORTS.get(name)
    if module_name is not None:
        module = import_module(module_name)
        globals()[name] = module
        return module

    target = _ATTR_EXPORTS.get(name)
    if target is not None:
        source_module_name, source_attr_name = target
        source_module = import_module(source_module_name)
        value = getattr(source_module, source_attr_name)
        globals()[name] = value
        return value

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(__all__))
