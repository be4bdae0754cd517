from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .buffer_reader import read_native_string
from .config import LOGGER_NAME, InspectorSettings
from .context import LookupContext, ProcessPathCache
from .drive_map import resolve_drive_map
from .errors import NativeCallError

logger = logging.getLogger(LOGGER_NAME).getChild("process_path")


async def resolve_path(
    native,
    pid: int,
    context: Optional[LookupContext] = None,
    settings: Optional[InspectorSettings] = None,
) -> Optional[str]:
    """Return the drive-letter image path of ``pid``, or ``None`` when no drive matches.

    Concurrent calls for one pid through the same ``context`` share a single
    open/read/close sequence and all observe its outcome.
    """
    settings = settings or InspectorSettings()
    context = context if context is not None else LookupContext()
    entry, started = context.process_paths.get_or_start(
        pid,
        lambda: _lookup_path(native, pid, context, settings),
    )
    if not started:
        logger.debug("pid=%s joins existing path lookup", pid)
    return await asyncio.shield(entry)


async def _lookup_path(
    native,
    pid: int,
    context: LookupContext,
    settings: InspectorSettings,
) -> Optional[str]:
    # pid 0 is the Idle process, and also what a window closed mid-batch reports.
    if pid <= 0:
        logger.debug("pid=%s has no image path", pid)
        return None

    drive_map = await context.ensure_drive_map(lambda: resolve_drive_map(native, settings))

    try:
        handle = await native.open_process(pid)
    except NativeCallError as exc:
        if not settings.ignore_process_errors:
            raise
        logger.debug("pid=%s open failed, path unknown (%s)", pid, exc)
        return None

    try:
        raw_path = await read_native_string(
            lambda buf, length: native.get_process_image_file_name(handle, buf, length),
            initial_length=settings.initial_buffer_length,
            max_length=settings.max_buffer_length,
        )
    except NativeCallError as exc:
        if not settings.ignore_process_errors:
            raise
        logger.debug("pid=%s image path read failed, path unknown (%s)", pid, exc)
        return None
    finally:
        await native.close_handle(handle)

    path = drive_map.to_user_path(raw_path)
    if path is None:
        logger.debug("pid=%s raw path %r matches no drive", pid, raw_path)
    return path


__all__ = ["ProcessPathCache", "resolve_path"]
