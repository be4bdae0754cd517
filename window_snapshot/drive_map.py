from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, Optional, Tuple

from .buffer_reader import read_native_string
from .config import LOGGER_NAME, InspectorSettings

logger = logging.getLogger(LOGGER_NAME).getChild("drive_map")


class DriveMap(Mapping):
    """Read-only drive letter -> device name table (``{"C": "\\Device\\HarddiskVolume3"}``)."""

    def __init__(self, pairs: Iterable[Tuple[str, str]] = ()) -> None:
        entries: Dict[str, str] = {}
        for letter, device in pairs:
            entries[letter.upper()] = device
        self._entries = entries

    def __getitem__(self, letter: str) -> str:
        return self._entries[letter.upper()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DriveMap({self._entries!r})"

    def to_user_path(self, raw_path: str) -> Optional[str]:
        best: Optional[Tuple[str, str]] = None
        for letter, device in self._entries.items():
            if not device or not raw_path.startswith(device):
                continue
            # Longest device wins so Volume12 is never rewritten through Volume1.
            if best is None or len(device) > len(best[1]):
                best = (letter, device)
        if best is None:
            return None
        letter, device = best
        return f"{letter}:{raw_path[len(device):]}"


async def resolve_drive_map(native, settings: Optional[InspectorSettings] = None) -> DriveMap:
    settings = settings or InspectorSettings()
    roots = await read_native_string(
        lambda buf, length: native.get_logical_drive_strings(buf, length),
        multi_string=True,
        initial_length=settings.initial_buffer_length,
        max_length=settings.max_buffer_length,
    )
    letters = [root[0] for root in roots if root]

    async def _device_for(letter: str) -> Tuple[str, str]:
        device = await read_native_string(
            lambda buf, length: native.query_dos_device(letter, buf, length),
            initial_length=settings.initial_buffer_length,
            max_length=settings.max_buffer_length,
        )
        return letter, device

    pairs = await asyncio.gather(*(_device_for(letter) for letter in letters))
    drive_map = DriveMap(pairs)
    logger.debug("resolved %s drive letters: %s", len(drive_map), ", ".join(drive_map))
    return drive_map


__all__ = ["DriveMap", "resolve_drive_map"]
