from __future__ import annotations

import ctypes
import logging
from typing import Any, Awaitable, Callable, List, Union

from .config import DEFAULT_INITIAL_BUFFER_LENGTH, DEFAULT_MAX_BUFFER_LENGTH, LOGGER_NAME
from .errors import BufferTooLarge, InsufficientBuffer

NativeFill = Callable[[Any, int], Awaitable[Any]]

logger = logging.getLogger(LOGGER_NAME).getChild("buffer")


def decode_single(raw: str) -> str:
    end = raw.find("\0")
    return raw if end < 0 else raw[:end]


def decode_multi(raw: str) -> List[str]:
    out: List[str] = []
    offset = 0
    while offset < len(raw):
        end = raw.find("\0", offset)
        if end < 0:
            end = len(raw)
        run = raw[offset:end]
        # An empty run is the second null of the terminating pair.
        if not run:
            break
        out.append(run)
        offset = end + 1
    return out


async def read_native_string(
    call: NativeFill,
    multi_string: bool = False,
    initial_length: int = DEFAULT_INITIAL_BUFFER_LENGTH,
    max_length: int = DEFAULT_MAX_BUFFER_LENGTH,
) -> Union[str, List[str]]:
    """Run ``call(buffer, length)`` with a doubling buffer until it fits.

    ``call`` must raise :class:`InsufficientBuffer` when ``length`` UTF-16 code
    units are not enough; any other exception propagates unchanged. Growth stops
    with :class:`BufferTooLarge` once the next length would pass ``max_length``.
    """
    if initial_length < 1:
        raise ValueError(f"initial_length must be positive, got {initial_length}")

    length = int(initial_length)
    while True:
        buf = ctypes.create_unicode_buffer(length)
        try:
            await call(buf, length)
        except InsufficientBuffer:
            next_length = length * 2
            if next_length > max_length:
                raise BufferTooLarge(next_length, max_length) from None
            logger.debug("buffer of %s code units too small, retrying with %s", length, next_length)
            length = next_length
            continue
        raw = buf[:]
        return decode_multi(raw) if multi_string else decode_single(raw)


__all__ = ["NativeFill", "decode_single", "decode_multi", "read_native_string"]
