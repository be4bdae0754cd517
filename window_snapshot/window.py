from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterable, Optional, Set, Tuple, Union

from .buffer_reader import read_native_string
from .config import InspectorSettings
from .context import LookupContext
from .process_path import resolve_path


class WindowField(str, Enum):
    HWND = "hwnd"
    TITLE = "title"
    PID = "pid"
    PATH = "path"
    VISIBLE = "visible"


ALL_FIELDS: Tuple[WindowField, ...] = tuple(WindowField)
FILTER_FIELDS: Tuple[WindowField, ...] = (WindowField.TITLE, WindowField.VISIBLE)

FieldSpec = Union[WindowField, str]


@dataclass
class WindowRecord:
    hwnd: int
    title: Optional[str] = None
    pid: Optional[int] = None
    path: Optional[str] = None
    visible: Optional[bool] = None
    _resolved: Set[WindowField] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._resolved.add(WindowField.HWND)
        for item in ALL_FIELDS:
            if getattr(self, item.value) is not None:
                self._resolved.add(item)

    @property
    def resolved_fields(self) -> FrozenSet[WindowField]:
        return frozenset(self._resolved)

    def has(self, item: FieldSpec) -> bool:
        return WindowField(item) in self._resolved

    def _store(self, item: WindowField, value: Any) -> None:
        setattr(self, item.value, value)
        self._resolved.add(item)

    def as_dict(self) -> Dict[str, Any]:
        return {item.value: getattr(self, item.value) for item in ALL_FIELDS if item in self._resolved}


def normalize_fields(fields: Optional[Iterable[FieldSpec]]) -> Tuple[WindowField, ...]:
    if fields is None:
        return ALL_FIELDS
    wanted = {WindowField(item) for item in fields}
    return tuple(item for item in ALL_FIELDS if item in wanted)


async def get_window_title(native, hwnd: int, settings: Optional[InspectorSettings] = None) -> str:
    settings = settings or InspectorSettings()
    return await read_native_string(
        lambda buf, length: native.get_window_text(hwnd, buf, length),
        initial_length=settings.title_buffer_length,
        max_length=settings.max_buffer_length,
    )


async def get_window_pid(native, hwnd: int) -> int:
    return int(await native.get_window_thread_process_id(hwnd))


async def get_window_visible(native, hwnd: int) -> bool:
    return bool(await native.is_window_visible(hwnd))


_SIMPLE_RESOLVERS: Dict[WindowField, Callable[[Any, int, InspectorSettings], Awaitable[Any]]] = {
    WindowField.TITLE: lambda native, hwnd, settings: get_window_title(native, hwnd, settings),
    WindowField.PID: lambda native, hwnd, _settings: get_window_pid(native, hwnd),
    WindowField.VISIBLE: lambda native, hwnd, _settings: get_window_visible(native, hwnd),
}


async def _path_after_pid(
    native,
    pid_source: Union[int, "asyncio.Future[int]"],
    context: LookupContext,
    settings: InspectorSettings,
) -> Optional[str]:
    pid = pid_source if isinstance(pid_source, int) else await pid_source
    return await resolve_path(native, pid, context, settings)


async def fill_fields(
    native,
    record: WindowRecord,
    fields: Optional[Iterable[FieldSpec]] = None,
    context: Optional[LookupContext] = None,
    settings: Optional[InspectorSettings] = None,
) -> None:
    """Resolve the requested fields that ``record`` does not have yet, in place.

    Independent fields run concurrently; ``path`` waits on ``pid`` and stores it
    as well. Every started lookup is allowed to finish. Successful values are
    stored, then the first failure (in field order) is re-raised.
    """
    settings = settings or InspectorSettings()
    context = context if context is not None else LookupContext()
    hwnd = record.hwnd

    tasks: Dict[WindowField, "asyncio.Future[Any]"] = {}

    def _pid_task() -> "asyncio.Future[Any]":
        if WindowField.PID not in tasks:
            tasks[WindowField.PID] = asyncio.ensure_future(get_window_pid(native, hwnd))
        return tasks[WindowField.PID]

    for item in normalize_fields(fields):
        if item is WindowField.HWND or record.has(item):
            continue
        if item is WindowField.PID:
            _pid_task()
        elif item is WindowField.PATH:
            pid_source = record.pid if record.has(WindowField.PID) else _pid_task()
            tasks[item] = asyncio.ensure_future(_path_after_pid(native, pid_source, context, settings))
        else:
            tasks[item] = asyncio.ensure_future(_SIMPLE_RESOLVERS[item](native, hwnd, settings))

    if not tasks:
        return

    results = await asyncio.gather(*tasks.values(), return_exceptions=True)
    first_error: Optional[BaseException] = None
    for item, result in zip(tasks.keys(), results):
        if isinstance(result, BaseException):
            if first_error is None:
                first_error = result
            continue
        record._store(item, result)
    if first_error is not None:
        raise first_error


__all__ = [
    "WindowField",
    "WindowRecord",
    "ALL_FIELDS",
    "FILTER_FIELDS",
    "normalize_fields",
    "get_window_title",
    "get_window_pid",
    "get_window_visible",
    "fill_fields",
]
