import asyncio
import string

import pytest

from native_fakes import FakeNative
from window_snapshot.config import InspectorSettings
from window_snapshot.drive_map import DriveMap, resolve_drive_map


def test_resolve_drive_map_queries_every_letter():
    native = FakeNative(
        drives={
            "C": "\\Device\\HarddiskVolume1",
            "D": "\\Device\\CdRom0",
        }
    )

    drive_map = asyncio.run(resolve_drive_map(native))

    assert dict(drive_map) == {"C": "\\Device\\HarddiskVolume1", "D": "\\Device\\CdRom0"}
    assert native.calls["get_logical_drive_strings"] == 1
    assert native.calls["query_dos_device"] == 2


def test_resolve_drive_map_grows_small_buffers():
    drives = {letter: f"\\Device\\HarddiskVolume{i}" for i, letter in enumerate(string.ascii_uppercase)}
    native = FakeNative(drives=drives)
    settings = InspectorSettings(initial_buffer_length=16)

    drive_map = asyncio.run(resolve_drive_map(native, settings))

    assert len(drive_map) == 26
    assert drive_map["Z"] == "\\Device\\HarddiskVolume25"
    assert native.calls["get_logical_drive_strings"] > 1


def test_resolve_drive_map_with_no_drives_is_empty():
    native = FakeNative(drives={})

    assert len(asyncio.run(resolve_drive_map(native))) == 0
    assert native.calls["query_dos_device"] == 0


def test_to_user_path_rewrites_device_prefix():
    drive_map = DriveMap([("C", "\\Device\\HarddiskVolume1")])

    assert drive_map.to_user_path("\\Device\\HarddiskVolume1\\Windows\\app.exe") == "C:\\Windows\\app.exe"


def test_to_user_path_prefers_longest_device():
    drive_map = DriveMap(
        [
            ("C", "\\Device\\HarddiskVolume1"),
            ("E", "\\Device\\HarddiskVolume12"),
        ]
    )

    assert drive_map.to_user_path("\\Device\\HarddiskVolume12\\Games\\run.exe") == "E:\\Games\\run.exe"


def test_to_user_path_without_match_is_none():
    drive_map = DriveMap([("C", "\\Device\\HarddiskVolume1")])

    assert drive_map.to_user_path("\\Device\\Mup\\server\\share\\tool.exe") is None
    assert DriveMap().to_user_path("") is None


def test_drive_map_is_read_only_and_case_insensitive():
    drive_map = DriveMap([("c", "\\Device\\HarddiskVolume1")])

    assert drive_map["C"] == drive_map["c"]
    with pytest.raises(TypeError):
        drive_map["D"] = "\\Device\\HarddiskVolume2"
