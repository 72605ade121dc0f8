"""
Fold combinators
================

Left folds over a Stream, lifted into LazyCoroResult: nothing is pulled
until the result is awaited, and failures come back as Error values.
"""

from __future__ import annotations

from kungfu import Error, LazyCoroResult, Ok, Result

from .._errors import EmptySequenceError
from .._types import Combine
from ..event import Data, End, Failure
from ..stream import Stream


def reduce[T, E](
    stream: Stream[T, E],
    combine: Combine[T, T],
) -> LazyCoroResult[T, E | EmptySequenceError]:
    """
    Left fold without a seed: the first value is the accumulator.

    Fails with EmptySequenceError if the stream ends before any value,
    or with the stream's own cause if it fails.
    """

    async def run() -> Result[T, E | EmptySequenceError]:
        subscription = stream.subscribe()
        try:
            first = await subscription.pull()
            match first:
                case Data(value):
                    acc = value
                case Failure(cause):
                    return Error(cause)
                case End():
                    return Error(EmptySequenceError())

            while True:
                event = await subscription.pull()
                match event:
                    case Data(value):
                        acc = combine(acc, value)
                    case Failure(cause):
                        return Error(cause)
                    case End():
                        return Ok(acc)
        finally:
            await subscription.release()

    return LazyCoroResult(run)


def fold[A, T, E](
    stream: Stream[T, E],
    combine: Combine[A, T],
    *,
    initial: A,
) -> LazyCoroResult[A, E]:
    """Left fold from `initial`. An empty stream gives `initial` back."""

    async def run() -> Result[A, E]:
        acc = initial
        subscription = stream.subscribe()
        try:
            while True:
                event = await subscription.pull()
                match event:
                    case Data(value):
                        acc = combine(acc, value)
                    case Failure(cause):
                        return Error(cause)
                    case End():
                        return Ok(acc)
        finally:
            await subscription.release()

    return LazyCoroResult(run)


__all__ = ("reduce", "fold")
