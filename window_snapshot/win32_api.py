from __future__ import annotations

import ctypes
import ctypes.wintypes
import os
from typing import Any, Callable, List

from .errors import ERROR_INSUFFICIENT_BUFFER, InsufficientBuffer, NativeCallError

PROCESS_QUERY_LIMITED_INFORMATION = 0x1000


class Win32API:
    def __init__(self) -> None:
        self.available = os.name == "nt"
        self._callback_refs = []
        if not self.available:
            return

        self.user32 = ctypes.WinDLL("user32", use_last_error=True)
        self.kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
        self.psapi = ctypes.WinDLL("psapi", use_last_error=True)
        self.WNDENUMPROC = ctypes.WINFUNCTYPE(
            ctypes.c_bool,
            ctypes.wintypes.HWND,
            ctypes.wintypes.LPARAM,
        )
        self._bind_signatures()

    def _bind_signatures(self) -> None:
        hwnd_t = ctypes.wintypes.HWND
        handle_t = ctypes.wintypes.HANDLE
        lparam_t = ctypes.wintypes.LPARAM
        bool_t = ctypes.wintypes.BOOL
        dword_t = ctypes.wintypes.DWORD
        lpwstr_t = ctypes.wintypes.LPWSTR
        dword_ptr_t = ctypes.POINTER(ctypes.wintypes.DWORD)

        self.user32.EnumWindows.argtypes = [self.WNDENUMPROC, lparam_t]
        self.user32.EnumWindows.restype = bool_t

        self.user32.GetForegroundWindow.argtypes = []
        self.user32.GetForegroundWindow.restype = hwnd_t

        self.user32.IsWindowVisible.argtypes = [hwnd_t]
        self.user32.IsWindowVisible.restype = bool_t

        self.user32.GetWindowTextW.argtypes = [hwnd_t, lpwstr_t, ctypes.c_int]
        self.user32.GetWindowTextW.restype = ctypes.c_int

        self.user32.GetWindowThreadProcessId.argtypes = [hwnd_t, dword_ptr_t]
        self.user32.GetWindowThreadProcessId.restype = dword_t

        self.kernel32.OpenProcess.argtypes = [dword_t, bool_t, dword_t]
        self.kernel32.OpenProcess.restype = handle_t

        self.kernel32.CloseHandle.argtypes = [handle_t]
        self.kernel32.CloseHandle.restype = bool_t

        self.kernel32.GetLogicalDriveStringsW.argtypes = [dword_t, lpwstr_t]
        self.kernel32.GetLogicalDriveStringsW.restype = dword_t

        self.kernel32.QueryDosDeviceW.argtypes = [ctypes.wintypes.LPCWSTR, lpwstr_t, dword_t]
        self.kernel32.QueryDosDeviceW.restype = dword_t

        self.psapi.GetProcessImageFileNameW.argtypes = [handle_t, lpwstr_t, dword_t]
        self.psapi.GetProcessImageFileNameW.restype = dword_t

    def _raise_last_error(self, function: str, capacity: int) -> None:
        winerror = int(ctypes.get_last_error())
        if winerror == ERROR_INSUFFICIENT_BUFFER:
            raise InsufficientBuffer(function, capacity)
        raise NativeCallError(function, winerror)

    def enum_windows(self, callback: Callable[[int], bool]) -> bool:
        if not self.available:
            return False

        def _cb(hwnd, _lparam):
            try:
                return bool(callback(int(hwnd or 0)))
            except Exception:
                return True

        c_cb = self.WNDENUMPROC(_cb)
        self._callback_refs.append(c_cb)
        try:
            return bool(self.user32.EnumWindows(c_cb, 0))
        finally:
            self._callback_refs.remove(c_cb)

    def enum_window_handles(self) -> List[int]:
        handles: List[int] = []
        self.enum_windows(lambda hwnd: handles.append(hwnd) or True)
        return handles

    def get_foreground_window(self) -> int:
        if not self.available:
            return 0
        return int(self.user32.GetForegroundWindow() or 0)

    def is_window_visible(self, hwnd: int) -> bool:
        if not self.available:
            return False
        return bool(self.user32.IsWindowVisible(hwnd))

    def get_window_text(self, hwnd: int, buf: Any, capacity: int) -> int:
        if not self.available:
            return 0
        # GetWindowTextW truncates instead of failing; a full buffer means the title may be longer.
        copied = int(self.user32.GetWindowTextW(hwnd, buf, capacity))
        if copied >= capacity - 1:
            raise InsufficientBuffer("GetWindowTextW", capacity)
        return copied

    def get_window_thread_process_id(self, hwnd: int) -> int:
        if not self.available:
            return 0
        pid = ctypes.wintypes.DWORD(0)
        self.user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
        return int(pid.value)

    def open_process(self, pid: int, access: int = PROCESS_QUERY_LIMITED_INFORMATION) -> int:
        if not self.available:
            return 0
        handle = self.kernel32.OpenProcess(access, False, pid)
        if not handle:
            raise NativeCallError("OpenProcess", ctypes.get_last_error())
        return int(handle)

    def close_handle(self, handle: int) -> bool:
        if not self.available or not handle:
            return False
        return bool(self.kernel32.CloseHandle(handle))

    def get_process_image_file_name(self, handle: int, buf: Any, capacity: int) -> int:
        if not self.available:
            return 0
        written = int(self.psapi.GetProcessImageFileNameW(handle, buf, capacity))
        if written == 0:
            self._raise_last_error("GetProcessImageFileNameW", capacity)
        return written

    def get_logical_drive_strings(self, buf: Any, capacity: int) -> int:
        if not self.available:
            return 0
        # The return value excludes the final null; when the buffer is short it is the required size.
        written = int(self.kernel32.GetLogicalDriveStringsW(capacity, buf))
        if written == 0:
            raise NativeCallError("GetLogicalDriveStringsW", ctypes.get_last_error())
        if written >= capacity:
            raise InsufficientBuffer("GetLogicalDriveStringsW", capacity)
        return written

    def query_dos_device(self, letter: str, buf: Any, capacity: int) -> int:
        if not self.available:
            return 0
        written = int(self.kernel32.QueryDosDeviceW(f"{letter}:", buf, capacity))
        if written == 0:
            self._raise_last_error("QueryDosDeviceW", capacity)
        return written


__all__ = ["Win32API", "PROCESS_QUERY_LIMITED_INFORMATION"]
