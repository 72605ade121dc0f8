"""
Drain
=====

Push every value of a stream into a Sink.

Lifecycle (bracket-style):
    append per Data -> flush once -> close once
close() runs whatever happens: completion, failure of the stream, failure
of the sink, or cancellation of the draining task (then without flush).
"""

from __future__ import annotations

from kungfu import Error, LazyCoroResult, Ok, Result

from .._errors import SinkError
from ..event import Data, End, Failure
from ..stream import Stream, Subscription
from .sink import Sink


async def _pump[T, E](
    subscription: Subscription[T, E],
    sink: Sink[T],
) -> Result[int, E | SinkError]:
    count = 0
    while True:
        event = await subscription.pull()
        match event:
            case Data(value):
                appended = await sink.append(value)
                match appended:
                    case Ok(_):
                        count += 1
                    case Error(e):
                        return Error(e)
            case Failure(cause):
                return Error(cause)
            case End():
                return Ok(count)


def drain[T, E](stream: Stream[T, E], sink: Sink[T]) -> LazyCoroResult[int, E | SinkError]:
    """
    Drain stream into sink. Ok(number of values appended) or the first error.

    Errors, first one wins: stream failure / append failure, then flush, then close.
    """

    async def run() -> Result[int, E | SinkError]:
        subscription = stream.subscribe()
        try:
            try:
                outcome = await _pump(subscription, sink)
            finally:
                await subscription.release()
            flushed = await sink.flush()
        finally:
            closed = await sink.close()

        match outcome:
            case Error(_):
                return outcome
            case Ok(_):
                pass
        for step in (flushed, closed):
            match step:
                case Error(e):
                    return Error(e)
                case Ok(_):
                    pass
        return outcome

    return LazyCoroResult(run)


__all__ = ("drain",)
