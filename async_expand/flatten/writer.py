"""
Flatten with log
================

flatten() run to the end, returning the collected values together with
the log of every recovery that happened on the way.
"""

from __future__ import annotations

import typing

from kungfu import Error, Ok

from .._types import Mapper, Observer
from ..event import Data, End, Failure
from ..recovery import AbortOnError, RecoveryPolicy
from ..stream import Stream
from ..writer import LazyCoroResultWriter, Log, WriterResult
from .flattener import Flattener, _check_timeout
from .observe import Recovered


def flatten_w[O, I](
    outer: Stream[O, typing.Any],
    mapper: Mapper[O, I, typing.Any],
    *,
    policy: RecoveryPolicy[I] | None = None,
    timeout: float | None = None,
    observer: Observer | None = None,
) -> LazyCoroResultWriter[list[I], object, Recovered[I, object]]:
    """
    Flatten and collect, keeping the recovery log.

    Example:
        wr = await flatten_w(files, read_chunks, policy=SkipSilently())
        wr.result  # Ok([...]) or Error(cause)
        wr.log     # Log([Recovered(...), ...])
    """
    _check_timeout(timeout)
    chosen: RecoveryPolicy[I] = policy if policy is not None else AbortOnError()

    async def run() -> WriterResult[list[I], object, Log[Recovered[I, object]]]:
        flattener = Flattener(outer, mapper, policy=chosen, timeout=timeout, observer=observer)
        values: list[I] = []
        try:
            while True:
                event = await flattener.pull()
                match event:
                    case Data(value):
                        values.append(value)
                    case Failure(cause):
                        return WriterResult(Error(cause), flattener.log)
                    case End():
                        return WriterResult(Ok(values), flattener.log)
        finally:
            await flattener.cancel()

    return LazyCoroResultWriter(run)


__all__ = ("flatten_w",)
