"""Awaitable facade over :class:`Win32API`.

Each native call runs on the default executor through ``asyncio.to_thread`` so
the event loop keeps interleaving other lookups while a call is blocked. The
thread that runs a call is also the one that reads its last-error value, so the
synchronous bindings raise their own exceptions before control comes back here.
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

from .win32_api import PROCESS_QUERY_LIMITED_INFORMATION, Win32API


class AsyncWin32:
    def __init__(self, api: Optional[Win32API] = None) -> None:
        self.api = api or Win32API()

    @property
    def available(self) -> bool:
        return bool(self.api.available)

    async def enum_window_handles(self) -> List[int]:
        return await asyncio.to_thread(self.api.enum_window_handles)

    async def get_foreground_window(self) -> int:
        return await asyncio.to_thread(self.api.get_foreground_window)

    async def is_window_visible(self, hwnd: int) -> bool:
        return await asyncio.to_thread(self.api.is_window_visible, hwnd)

    async def get_window_text(self, hwnd: int, buf: Any, capacity: int) -> int:
        return await asyncio.to_thread(self.api.get_window_text, hwnd, buf, capacity)

    async def get_window_thread_process_id(self, hwnd: int) -> int:
        return await asyncio.to_thread(self.api.get_window_thread_process_id, hwnd)

    async def open_process(self, pid: int) -> int:
        return await asyncio.to_thread(self.api.open_process, pid, PROCESS_QUERY_LIMITED_INFORMATION)

    async def close_handle(self, handle: int) -> bool:
        return await asyncio.to_thread(self.api.close_handle, handle)

    async def get_process_image_file_name(self, handle: int, buf: Any, capacity: int) -> int:
        return await asyncio.to_thread(self.api.get_process_image_file_name, handle, buf, capacity)

    async def get_logical_drive_strings(self, buf: Any, capacity: int) -> int:
        return await asyncio.to_thread(self.api.get_logical_drive_strings, buf, capacity)

    async def query_dos_device(self, letter: str, buf: Any, capacity: int) -> int:
        return await asyncio.to_thread(self.api.query_dos_device, letter, buf, capacity)


__all__ = ["AsyncWin32"]
