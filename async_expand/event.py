"""
Events
======

The three things a stream can say: here is a value, I failed, I'm done.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Data[T]:
    """One value."""

    value: T


@dataclass(frozen=True, slots=True)
class Failure[E]:
    """
    Error event.

    Unlike a raised exception, a Failure is just another event: a source
    built with Stream.from_events may emit one and keep producing data.
    """

    cause: E


@dataclass(frozen=True, slots=True)
class End:
    """No more events."""


END = End()

type Event[T, E] = Data[T] | Failure[E] | End


__all__ = ("Data", "Failure", "End", "END", "Event")
