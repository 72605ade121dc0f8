from __future__ import annotations

import pytest
from kungfu import Error, Ok, Result

from async_expand import END, Data, Event, Failure, Stream, Subscription


class Boom(Exception):
    """Failure used across tests."""


class ActivationCounter:
    """Counts how many tracked streams are subscribed at the same time."""

    def __init__(self) -> None:
        self.active = 0
        self.peak = 0
        self.subscribed: list[str] = []
        self.released: list[str] = []

    def track[T, E](self, name: str, stream: Stream[T, E]) -> Stream[T, E]:
        def subscribe() -> Subscription[T, E]:
            self.active += 1
            self.peak = max(self.peak, self.active)
            self.subscribed.append(name)
            return _Tracked(self, name, stream.subscribe())

        return Stream(subscribe)


class _Tracked[T, E]:
    def __init__(self, counter: ActivationCounter, name: str, inner: Subscription[T, E]) -> None:
        self._counter = counter
        self._name = name
        self._inner = inner
        self._released = False

    async def pull(self) -> Event[T, E]:
        return await self._inner.pull()

    async def release(self) -> None:
        if not self._released:
            self._released = True
            self._counter.active -= 1
            self._counter.released.append(self._name)
        await self._inner.release()


def faulty(*values: int, fail_at: int) -> Stream[int, Boom]:
    """Emits values, with a Failure in place of `fail_at`, and keeps going."""
    return Stream.events(
        *(Failure(Boom(f"bad {v}")) if v == fail_at else Data(v) for v in values),
        END,
    )


async def pull_all[T, E](subscription: Subscription[T, E]) -> list[Event[T, E]]:
    """Pull until End or Failure (inclusive)."""
    events: list[Event[T, E]] = []
    while True:
        event = await subscription.pull()
        events.append(event)
        if not isinstance(event, Data):
            return events


def data_of[T, E](events: list[Event[T, E]]) -> list[T]:
    return [event.value for event in events if isinstance(event, Data)]


def unwrap_err[T, E](result: Result[T, E]) -> E:
    match result:
        case Error(e):
            return e
        case Ok(v):
            pytest.fail(f"expected Error, got Ok({v!r})")
    raise AssertionError("unreachable")


__all__ = (
    "ActivationCounter",
    "Boom",
    "data_of",
    "faulty",
    "pull_all",
    "unwrap_err",
)
