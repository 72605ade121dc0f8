"""
Sink
====

Where a drained stream ends up. Every operation answers with a Result so
a failing sink never raises into the pipeline.
"""

from __future__ import annotations

import typing

from kungfu import Error, Ok, Result

from .._errors import SinkError


class Sink[T](typing.Protocol):
    async def append(self, data: T, /) -> Result[None, SinkError]: ...

    async def flush(self) -> Result[None, SinkError]: ...

    async def close(self) -> Result[None, SinkError]: ...


class BufferSink[T]:
    """In-memory sink. Keeps appended values and the order of calls."""

    __slots__ = ("items", "calls", "_closed")

    def __init__(self) -> None:
        self.items: list[T] = []
        self.calls: list[str] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def append(self, data: T, /) -> Result[None, SinkError]:
        self.calls.append("append")
        if self._closed:
            return Error(SinkError("append", RuntimeError("sink is closed")))
        self.items.append(data)
        return Ok(None)

    async def flush(self) -> Result[None, SinkError]:
        self.calls.append("flush")
        if self._closed:
            return Error(SinkError("flush", RuntimeError("sink is closed")))
        return Ok(None)

    async def close(self) -> Result[None, SinkError]:
        self.calls.append("close")
        if self._closed:
            return Error(SinkError("close", RuntimeError("sink is already closed")))
        self._closed = True
        return Ok(None)


__all__ = ("Sink", "BufferSink")
