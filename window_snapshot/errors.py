from __future__ import annotations

from typing import Optional

ERROR_INSUFFICIENT_BUFFER = 122


class WindowSnapshotError(Exception):
    pass


class NativeCallError(WindowSnapshotError):
    def __init__(self, function: str, winerror: int = 0, message: Optional[str] = None) -> None:
        self.function = function
        self.winerror = int(winerror)
        super().__init__(message or f"{function} failed (winerror={self.winerror})")


class InsufficientBuffer(NativeCallError):
    """Raised by a native read when the supplied buffer is too small; retried by the reader."""

    def __init__(self, function: str, capacity: int) -> None:
        self.capacity = int(capacity)
        super().__init__(
            function,
            ERROR_INSUFFICIENT_BUFFER,
            f"{function}: buffer of {self.capacity} code units is too small",
        )


class BufferTooLarge(WindowSnapshotError):
    def __init__(self, requested: int, limit: int) -> None:
        self.requested = int(requested)
        self.limit = int(limit)
        super().__init__(f"buffer growth to {self.requested} code units exceeds limit {self.limit}")


__all__ = [
    "ERROR_INSUFFICIENT_BUFFER",
    "WindowSnapshotError",
    "NativeCallError",
    "InsufficientBuffer",
    "BufferTooLarge",
]
