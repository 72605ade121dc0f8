"""Collect combinator"""

from __future__ import annotations

from kungfu import LazyCoroResult, Result

from ..stream import Stream
from .fold import fold


def _append[T](acc: list[T], value: T) -> list[T]:
    acc.append(value)
    return acc


def collect[T, E](stream: Stream[T, E]) -> LazyCoroResult[list[T], E]:
    """
    All values, in order.

    Implemented as fold with a fresh list per run.
    """

    async def run() -> Result[list[T], E]:
        return await fold(stream, _append, initial=[])()

    return LazyCoroResult(run)


__all__ = ("collect",)
