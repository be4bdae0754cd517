import asyncio

import pytest

from native_fakes import write_units
from window_snapshot.buffer_reader import decode_multi, decode_single, read_native_string
from window_snapshot.errors import BufferTooLarge, InsufficientBuffer, NativeCallError


def test_single_string_grows_until_it_fits_without_truncation():
    text = "x" * 1000
    attempts = []

    async def call(buf, length):
        attempts.append(length)
        return write_units(buf, length, text + "\0", "GetWindowTextW")

    result = asyncio.run(read_native_string(call))

    assert result == text
    assert attempts == [256, 512, 1024]


def test_multi_string_returns_each_run_and_drops_terminator():
    async def call(buf, length):
        return write_units(buf, length, "C:\\\0D:\\\0Z:\\\0\0", "GetLogicalDriveStringsW")

    assert asyncio.run(read_native_string(call, multi_string=True)) == ["C:\\", "D:\\", "Z:\\"]


def test_multi_string_of_only_terminator_is_empty():
    async def call(buf, length):
        return write_units(buf, length, "\0\0", "GetLogicalDriveStringsW")

    assert asyncio.run(read_native_string(call, multi_string=True)) == []


def test_decode_single_stops_at_first_null():
    assert decode_single("title\0garbage") == "title"
    assert decode_single("no-null") == "no-null"


def test_decode_multi_ignores_data_after_double_null():
    assert decode_multi("a\0bc\0\0stale\0") == ["a", "bc"]
    assert decode_multi("a\0tail") == ["a", "tail"]


def test_other_failures_propagate_without_retry():
    attempts = []

    async def call(buf, length):
        attempts.append(length)
        raise NativeCallError("QueryDosDeviceW", 2)

    with pytest.raises(NativeCallError) as info:
        asyncio.run(read_native_string(call))

    assert info.value.winerror == 2
    assert attempts == [256]


def test_growth_stops_at_max_length():
    attempts = []

    async def call(buf, length):
        attempts.append(length)
        raise InsufficientBuffer("GetProcessImageFileNameW", length)

    with pytest.raises(BufferTooLarge) as info:
        asyncio.run(read_native_string(call, initial_length=256, max_length=1024))

    assert attempts == [256, 512, 1024]
    assert info.value.requested == 2048
    assert info.value.limit == 1024


def test_initial_length_must_be_positive():
    async def call(buf, length):
        return 0

    with pytest.raises(ValueError):
        asyncio.run(read_native_string(call, initial_length=0))
