from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Optional, Tuple

from .drive_map import DriveMap


class ProcessPathCache:
    """pid -> pending-or-finished path lookup.

    A slot is claimed in the same synchronous step that decides to start the
    lookup, so callers racing on one pid share a single task. Slots are never
    evicted.
    """

    def __init__(self) -> None:
        self._entries: Dict[int, "asyncio.Future[Optional[str]]"] = {}

    def __contains__(self, pid: object) -> bool:
        return pid in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_start(
        self,
        pid: int,
        factory: Callable[[], Awaitable[Optional[str]]],
    ) -> Tuple["asyncio.Future[Optional[str]]", bool]:
        entry = self._entries.get(pid)
        if entry is not None:
            return entry, False
        entry = asyncio.ensure_future(factory())
        self._entries[pid] = entry
        return entry, True


class LookupContext:
    """Caches shared by every lookup of one enumeration batch."""

    def __init__(
        self,
        drive_map: Optional[DriveMap] = None,
        process_paths: Optional[ProcessPathCache] = None,
    ) -> None:
        self.process_paths = process_paths if process_paths is not None else ProcessPathCache()
        self._drive_map = drive_map
        self._drive_map_task: Optional["asyncio.Future[DriveMap]"] = None

    @property
    def drive_map(self) -> Optional[DriveMap]:
        return self._drive_map

    async def ensure_drive_map(self, factory: Callable[[], Awaitable[DriveMap]]) -> DriveMap:
        if self._drive_map is not None:
            return self._drive_map
        if self._drive_map_task is None:
            self._drive_map_task = asyncio.ensure_future(factory())
        drive_map = await asyncio.shield(self._drive_map_task)
        self._drive_map = drive_map
        return drive_map


__all__ = ["ProcessPathCache", "LookupContext"]
