from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

from .config import LOGGER_NAME, SETTINGS_FILE, InspectorSettings, consume_load_warnings
from .context import LookupContext
from .drive_map import DriveMap, resolve_drive_map
from .logging_setup import setup_logging
from .native import AsyncWin32
from .process_path import resolve_path
from .window import (
    FILTER_FIELDS,
    FieldSpec,
    WindowField,
    WindowRecord,
    fill_fields,
    get_window_pid,
    get_window_title,
    get_window_visible,
    normalize_fields,
)


class WindowInspector:
    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        settings: Optional[InspectorSettings] = None,
        native=None,
    ) -> None:
        base_logger = logger or logging.getLogger(LOGGER_NAME)
        self.logger = base_logger.getChild("WindowInspector")
        self.settings = settings or InspectorSettings()
        self.native = native if native is not None else AsyncWin32()

    @classmethod
    def from_settings(
        cls,
        settings_path: str = SETTINGS_FILE,
        log_file: Optional[str] = None,
        native=None,
    ) -> "WindowInspector":
        """Load saved settings, configure logging at their level and build an inspector."""
        settings = InspectorSettings.load(settings_path)
        logger = setup_logging(settings.log_level, log_file)
        for warning in consume_load_warnings():
            logger.warning(warning)
        return cls(logger, settings, native)

    def new_context(self, drive_map: Optional[DriveMap] = None) -> LookupContext:
        return LookupContext(drive_map=drive_map)

    async def list_window_handles(self) -> List[int]:
        return list(await self.native.enum_window_handles())

    async def get_foreground_handle(self) -> int:
        return int(await self.native.get_foreground_window())

    async def get_title(self, hwnd: int) -> str:
        return await get_window_title(self.native, hwnd, self.settings)

    async def get_pid(self, hwnd: int) -> int:
        return await get_window_pid(self.native, hwnd)

    async def is_visible(self, hwnd: int) -> bool:
        return await get_window_visible(self.native, hwnd)

    async def get_drive_map(self) -> DriveMap:
        return await resolve_drive_map(self.native, self.settings)

    async def get_path_by_pid(self, pid: int, context: Optional[LookupContext] = None) -> Optional[str]:
        return await resolve_path(self.native, pid, context, self.settings)

    async def fill_fields(
        self,
        record: WindowRecord,
        fields: Optional[Iterable[FieldSpec]] = None,
        context: Optional[LookupContext] = None,
    ) -> None:
        await fill_fields(self.native, record, fields, context, self.settings)

    async def get_window(
        self,
        hwnd: int,
        fields: Optional[Iterable[FieldSpec]] = None,
        context: Optional[LookupContext] = None,
    ) -> WindowRecord:
        record = WindowRecord(hwnd)
        await self.fill_fields(record, fields, context)
        return record

    async def get_active_window(
        self,
        fields: Optional[Iterable[FieldSpec]] = None,
        context: Optional[LookupContext] = None,
    ) -> WindowRecord:
        return await self.get_window(await self.get_foreground_handle(), fields, context)

    async def list_windows(
        self,
        include_all: bool = False,
        fields: Optional[Iterable[FieldSpec]] = None,
    ) -> List[WindowRecord]:
        """Snapshot every top-level window.

        Without ``include_all`` only visible windows with a non-empty title are
        kept, and the requested fields are resolved for those survivors only.
        Every window's lookups run to completion before the first failure, in
        handle order, is raised.
        """
        requested = normalize_fields(fields)
        first_fields = requested if include_all else FILTER_FIELDS
        context = self.new_context()
        if WindowField.PATH in requested:
            await context.ensure_drive_map(self.get_drive_map)

        handles = await self.list_window_handles()
        records = [WindowRecord(hwnd) for hwnd in handles]
        await self._fill_all(records, first_fields, context)

        if include_all:
            self.logger.debug("listed %s windows (unfiltered)", len(records))
            return records

        selected = [record for record in records if record.visible and record.title]
        self.logger.debug("listed %s windows, %s visible with a title", len(records), len(selected))
        await self._fill_all(selected, requested, context)
        return selected

    async def _fill_all(
        self,
        records: List[WindowRecord],
        fields: Iterable[FieldSpec],
        context: LookupContext,
    ) -> None:
        fields = list(fields)
        results = await asyncio.gather(
            *(self.fill_fields(record, fields, context) for record in records),
            return_exceptions=True,
        )
        for record, result in zip(records, results):
            if isinstance(result, BaseException):
                self.logger.debug("hwnd=%s lookup failed: %s", record.hwnd, result)
                raise result

    def snapshot(
        self,
        include_all: bool = False,
        fields: Optional[Iterable[FieldSpec]] = None,
    ) -> List[WindowRecord]:
        return asyncio.run(self.list_windows(include_all, fields))


__all__ = ["WindowInspector"]
