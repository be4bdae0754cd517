import asyncio
import json
import logging
import logging.handlers
from pathlib import Path

import pytest

from native_fakes import FakeNative
from window_snapshot.config import LOGGER_NAME, consume_load_warnings
from window_snapshot.errors import NativeCallError
from window_snapshot.inspector import WindowInspector

RAW_SHELL = "\\Device\\HarddiskVolume1\\Windows\\explorer.exe"
RAW_EDITOR = "\\Device\\HarddiskVolume2\\Tools\\editor.exe"


def _native():
    return FakeNative(
        windows={
            1: {"title": "Editor", "pid": 20, "visible": True},
            2: {"title": "", "pid": 10, "visible": False},
            3: {"title": "", "pid": 10, "visible": True},
            4: {"title": "Hidden helper", "pid": 30, "visible": False},
            5: {"title": "Explorer", "pid": 10, "visible": True},
            6: {"title": "Editor - second", "pid": 20, "visible": True},
        },
        drives={"C": "\\Device\\HarddiskVolume1", "D": "\\Device\\HarddiskVolume2"},
        processes={10: RAW_SHELL, 20: RAW_EDITOR, 30: RAW_SHELL},
        foreground=5,
    )


def _inspector(native):
    logger = logging.getLogger("test")
    logger.addHandler(logging.NullHandler())
    return WindowInspector(logger, native=native)


def test_list_window_handles_keeps_native_order():
    inspector = _inspector(_native())

    assert asyncio.run(inspector.list_window_handles()) == [1, 2, 3, 4, 5, 6]


def test_list_windows_filters_to_visible_titled_windows():
    native = _native()
    inspector = _inspector(native)

    windows = asyncio.run(inspector.list_windows(False, ["title", "pid", "path"]))

    assert [w.hwnd for w in windows] == [1, 5, 6]
    for window in windows:
        assert window.visible is True
        assert window.title
    assert windows[0].path == "D:\\Tools\\editor.exe"
    assert windows[1].path == "C:\\Windows\\explorer.exe"


def test_filtered_listing_is_a_subset_of_full_listing():
    inspector = _inspector(_native())

    everything = asyncio.run(inspector.list_windows(True, ["title", "visible"]))
    filtered = asyncio.run(inspector.list_windows(False, ["title", "visible"]))

    assert len(everything) == 6
    assert {w.hwnd for w in filtered} <= {w.hwnd for w in everything}


def test_untitled_invisible_window_only_appears_with_include_all():
    inspector = _inspector(_native())

    everything = asyncio.run(inspector.list_windows(True))
    filtered = asyncio.run(inspector.list_windows(False))

    assert 2 in {w.hwnd for w in everything}
    assert 2 not in {w.hwnd for w in filtered}
    hidden = next(w for w in everything if w.hwnd == 2)
    assert hidden.title == "" and hidden.visible is False


def test_batch_shares_drive_map_and_process_lookups():
    native = _native()
    inspector = _inspector(native)

    asyncio.run(inspector.list_windows(True, ["path"]))

    assert native.calls["get_logical_drive_strings"] == 1
    assert native.calls["query_dos_device"] == 2
    assert sorted(native.opened_pids) == [10, 20, 30]
    assert native.open_handles == set()


def test_filtered_batch_resolves_paths_only_for_survivors():
    native = _native()
    inspector = _inspector(native)

    windows = asyncio.run(inspector.list_windows(False, ["path"]))

    assert sorted(native.opened_pids) == [10, 20]
    assert all(w.has("pid") and w.has("path") for w in windows)


def test_listing_without_path_never_touches_drives_or_processes():
    native = _native()
    inspector = _inspector(native)

    asyncio.run(inspector.list_windows(False, ["title", "visible"]))

    assert native.calls["get_logical_drive_strings"] == 0
    assert native.calls["open_process"] == 0


def test_empty_field_list_keeps_only_handles_when_unfiltered():
    inspector = _inspector(_native())

    windows = asyncio.run(inspector.list_windows(True, []))

    assert [w.as_dict() for w in windows] == [{"hwnd": h} for h in range(1, 7)]


def test_get_active_window_uses_foreground_handle():
    native = _native()
    inspector = _inspector(native)

    window = asyncio.run(inspector.get_active_window(["title", "path"]))

    assert window.hwnd == 5
    assert window.title == "Explorer"
    assert window.pid == 10
    assert window.path == "C:\\Windows\\explorer.exe"


def test_get_window_with_no_fields_only_sets_handle():
    native = _native()
    inspector = _inspector(native)

    window = asyncio.run(inspector.get_window(4, []))

    assert window.as_dict() == {"hwnd": 4}
    assert sum(native.calls.values()) == 0


def test_single_value_helpers():
    inspector = _inspector(_native())

    async def scenario():
        return (
            await inspector.get_title(4),
            await inspector.get_pid(4),
            await inspector.is_visible(4),
            await inspector.get_path_by_pid(30),
            dict(await inspector.get_drive_map()),
        )

    title, pid, visible, path, drives = asyncio.run(scenario())

    assert (title, pid, visible) == ("Hidden helper", 30, False)
    assert path == "C:\\Windows\\explorer.exe"
    assert drives == {"C": "\\Device\\HarddiskVolume1", "D": "\\Device\\HarddiskVolume2"}


def test_snapshot_runs_listing_to_completion():
    inspector = _inspector(_native())

    windows = inspector.snapshot(False, ["title"])

    assert [w.title for w in windows] == ["Editor", "Explorer", "Editor - second"]


def test_window_closed_mid_batch_does_not_fail_listing():
    native = FakeNative(
        windows={
            100: {"title": "Editor", "pid": 42, "visible": True},
            200: {},
        },
        processes={42: "\\Device\\HarddiskVolume1\\Tools\\editor.exe"},
        open_errors={0: 87},
    )
    inspector = _inspector(native)

    windows = asyncio.run(inspector.list_windows(True))

    assert [w.hwnd for w in windows] == [100, 200]
    assert windows[0].path == "C:\\Tools\\editor.exe"
    vanished = windows[1]
    assert (vanished.title, vanished.pid, vanished.visible) == ("", 0, False)
    assert vanished.has("path") and vanished.path is None
    assert native.opened_pids == [42]


def test_failed_window_lets_siblings_finish_then_raises_first_in_handle_order():
    native = FakeNative(
        windows={
            1: {"title": "Broken", "pid": 10, "visible": True},
            2: {"title": "Editor", "pid": 20, "visible": True},
            3: {"title": "Also broken", "pid": 30, "visible": True},
            4: {"title": "Shell", "pid": 40, "visible": True},
        },
        processes={20: RAW_EDITOR, 40: RAW_SHELL},
        open_errors={10: 5, 30: 6},
    )
    inspector = _inspector(native)

    async def scenario():
        with pytest.raises(NativeCallError) as info:
            await inspector.list_windows(True, ["path"])
        # Checked before the loop shuts down, so nothing is still in flight.
        return info.value, native.calls["close_handle"], set(native.open_handles)

    error, closed, still_open = asyncio.run(scenario())

    assert error.winerror == 5
    assert sorted(native.opened_pids) == [20, 40]
    assert native.calls["get_process_image_file_name"] == 2
    assert closed == 2
    assert still_open == set()


def test_from_settings_configures_logging_at_saved_level(tmp_path: Path):
    settings_file = tmp_path / "window_snapshot_settings.json"
    settings_file.write_text(
        json.dumps({"log_level": "warning", "max_buffer_length": 256}),
        encoding="utf-8",
    )
    log_file = tmp_path / "window_snapshot.log"
    consume_load_warnings()

    inspector = WindowInspector.from_settings(str(settings_file), str(log_file), native=_native())
    base = logging.getLogger(LOGGER_NAME)
    try:
        assert inspector.settings.log_level == "WARNING"
        assert inspector.settings.max_buffer_length == inspector.settings.title_buffer_length
        stream_handler = next(h for h in base.handlers if not isinstance(h, logging.handlers.RotatingFileHandler))
        assert stream_handler.level == logging.WARNING
        assert consume_load_warnings() == []
        for handler in base.handlers:
            handler.flush()
        assert "max_buffer_length raised" in log_file.read_text(encoding="utf-8")
        assert [w.title for w in inspector.snapshot(False, ["title"])] == ["Editor", "Explorer", "Editor - second"]
    finally:
        for handler in list(base.handlers):
            handler.close()
        base.handlers.clear()
