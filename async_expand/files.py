"""
File collaborators
==================

Byte streams over files and a Sink writing to one. Blocking file calls run
in worker threads (asyncio.to_thread), one call at a time.

    paths = Stream.of("a.txt", "b.txt")
    await paths.expand(read_chunks).drain_into(FileSink("out.txt"))
"""

from __future__ import annotations

import asyncio
import typing
from collections.abc import AsyncIterator
from pathlib import Path

from kungfu import Error, Ok, Result

from ._errors import SinkError
from .event import Data, Event
from .stream import Stream

DEFAULT_CHUNK_SIZE = 64 * 1024


def read_chunks(
    path: str | Path,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Stream[bytes, OSError]:
    """
    Stream of byte chunks of one file. The file is opened on subscribe.

    An OSError while opening or reading ends the stream with a Failure.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    target = Path(path)

    async def events() -> AsyncIterator[Event[bytes, OSError]]:
        handle = await asyncio.to_thread(target.open, "rb")
        try:
            while chunk := await asyncio.to_thread(handle.read, chunk_size):
                yield Data(chunk)
        finally:
            await asyncio.to_thread(handle.close)

    return Stream.from_events(events)


class FileSink:
    """
    Sink appending bytes to a file. The file is created (truncated) on first use.
    """

    __slots__ = ("_path", "_handle", "_closed")

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._handle: typing.BinaryIO | None = None
        self._closed = False

    @property
    def path(self) -> Path:
        return self._path

    async def _open(self) -> typing.BinaryIO:
        if self._handle is None:
            self._handle = await asyncio.to_thread(self._path.open, "wb")
        return self._handle

    async def append(self, data: bytes, /) -> Result[None, SinkError]:
        if self._closed:
            return Error(SinkError("append", RuntimeError("sink is closed")))
        try:
            handle = await self._open()
            await asyncio.to_thread(handle.write, data)
        except OSError as exc:
            return Error(SinkError("append", exc))
        return Ok(None)

    async def flush(self) -> Result[None, SinkError]:
        if self._closed:
            return Error(SinkError("flush", RuntimeError("sink is closed")))
        try:
            handle = await self._open()
            await asyncio.to_thread(handle.flush)
        except OSError as exc:
            return Error(SinkError("flush", exc))
        return Ok(None)

    async def close(self) -> Result[None, SinkError]:
        if self._closed:
            return Error(SinkError("close", RuntimeError("sink is already closed")))
        self._closed = True
        handle, self._handle = self._handle, None
        if handle is None:
            return Ok(None)
        try:
            await asyncio.to_thread(handle.close)
        except OSError as exc:
            return Error(SinkError("close", exc))
        return Ok(None)


__all__ = ("DEFAULT_CHUNK_SIZE", "FileSink", "read_chunks")
