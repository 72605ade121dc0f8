"""
Stream
======

Lazy, pull-based sequence of events.

A Stream is only a recipe: nothing runs until subscribe(), and every
subscription starts the series from the beginning. A Subscription is the
one active consumption of that recipe.
"""

from __future__ import annotations

import typing
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable, Sequence

from kungfu import LazyCoroResult

from ._errors import EmptySequenceError, SinkError, StreamFailedError
from ._types import Combine, Mapper, NoError, Observer
from .event import END, Data, End, Event, Failure

if typing.TYPE_CHECKING:
    from .recovery import RecoveryPolicy
    from .sink import Sink


class Subscription[T, E](typing.Protocol):
    """One active consumption of a Stream."""

    async def pull(self) -> Event[T, E]:
        """Next event. Suspends until the source produces one."""
        ...

    async def release(self) -> None:
        """Stop consuming and free the source. Idempotent."""
        ...


class _IteratorSubscription[T, E]:
    """
    Subscription over an async iterator of events.

    An exception raised by the iterator becomes a Failure and ends it.
    """

    __slots__ = ("_iterator", "_done")

    def __init__(self, iterator: AsyncIterator[Event[T, E]]) -> None:
        self._iterator = iterator
        self._done = False

    async def pull(self) -> Event[T, E]:
        if self._done:
            return END
        try:
            event = await anext(self._iterator)
        except StopAsyncIteration:
            self._done = True
            return END
        except Exception as exc:
            self._done = True
            return Failure(typing.cast(E, exc))
        if isinstance(event, End):
            self._done = True
        return event

    async def release(self) -> None:
        self._done = True
        aclose = getattr(self._iterator, "aclose", None)
        if aclose is not None:
            await aclose()


class _ConcatSubscription[T, E]:
    """Exhausts each stream before subscribing to the next."""

    __slots__ = ("_pending", "_current", "_done")

    def __init__(self, streams: Sequence[Stream[T, E]]) -> None:
        self._pending = iter(streams)
        self._current: Subscription[T, E] | None = None
        self._done = False

    async def pull(self) -> Event[T, E]:
        while not self._done:
            if self._current is None:
                stream = next(self._pending, None)
                if stream is None:
                    self._done = True
                    break
                self._current = stream.subscribe()

            event = await self._current.pull()
            match event:
                case End():
                    current, self._current = self._current, None
                    await current.release()
                case _:
                    return event
        return END

    async def release(self) -> None:
        self._done = True
        if self._current is not None:
            current, self._current = self._current, None
            await current.release()


class Stream[T, E]:
    """
    Lazy stream of Data / Failure / End events.

    Usage:
        words = Stream.of("Driver", "Family")
        chars = words.expand(lambda w: Stream.of(*w))
        async for ch in chars:
            print(ch)
    """

    __slots__ = ("_subscribe",)

    def __init__(self, subscribe: Callable[[], Subscription[T, E]], /) -> None:
        """Create Stream from a fn returning a fresh subscription."""
        self._subscribe = subscribe

    # Constructors

    @staticmethod
    def from_events[V, Err](
        source: Callable[[], AsyncIterator[Event[V, Err]]],
    ) -> Stream[V, Err]:
        """
        Stream from an async factory of explicit events.

        The only constructor that can fail and keep going:

            async def numbers():
                yield Data(1)
                yield Failure(ValueError("bad"))
                yield Data(2)
        """
        return Stream(lambda: _IteratorSubscription(source()))

    @staticmethod
    def from_async[V](
        source: Callable[[], AsyncIterable[V]],
    ) -> Stream[V, Exception]:
        """Stream from an async iterable factory. A raised exception ends it with a Failure."""

        async def events() -> AsyncIterator[Event[V, Exception]]:
            async for value in source():
                yield Data(value)

        return Stream.from_events(events)

    @staticmethod
    def from_iterable[V](items: Iterable[V]) -> Stream[V, NoError]:
        """Stream over a (re-iterable) collection."""

        async def events() -> AsyncIterator[Event[V, NoError]]:
            for item in items:
                yield Data(item)

        return Stream.from_events(events)

    @staticmethod
    def of[V](*values: V) -> Stream[V, NoError]:
        return Stream.from_iterable(values)

    @staticmethod
    def events[V, Err](*events: Event[V, Err]) -> Stream[V, Err]:
        """Stream replaying fixed events. Handy in tests."""

        async def source() -> AsyncIterator[Event[V, Err]]:
            for event in events:
                yield event

        return Stream.from_events(source)

    @staticmethod
    def empty() -> Stream[typing.Never, NoError]:
        return Stream.from_iterable(())

    @staticmethod
    def fail[Err](cause: Err) -> Stream[typing.Never, Err]:
        """Stream that fails right away."""
        return Stream.events(Failure(cause), END)

    # Consumption

    def subscribe(self) -> Subscription[T, E]:
        """Start a fresh consumption from the beginning."""
        return self._subscribe()

    async def __aiter__(self) -> AsyncIterator[T]:
        """Iterate data values. A Failure is raised where it arrives."""
        subscription = self.subscribe()
        try:
            while True:
                event = await subscription.pull()
                match event:
                    case Data(value):
                        yield value
                    case Failure(cause):
                        if isinstance(cause, Exception):
                            raise cause
                        raise StreamFailedError(cause)
                    case End():
                        return
        finally:
            await subscription.release()

    # Fluent sugar

    def expand[U](
        self,
        mapper: Mapper[T, U, typing.Any],
        *,
        policy: RecoveryPolicy[U] | None = None,
        timeout: float | None = None,
        observer: Observer | None = None,
    ) -> Stream[U, typing.Any]:
        """Map every item to a stream and flatten them one at a time. See flatten()."""
        from .flatten import flatten
        return flatten(self, mapper, policy=policy, timeout=timeout, observer=observer)

    def then(self, *others: Stream[T, E]) -> Stream[T, E]:
        """This stream, then each of others in order."""
        return concat(self, *others)

    def reduce(self, combine: Combine[T, T]) -> LazyCoroResult[T, E | EmptySequenceError]:
        from .collection import reduce
        return reduce(self, combine)

    def fold[A](self, combine: Combine[A, T], *, initial: A) -> LazyCoroResult[A, E]:
        from .collection import fold
        return fold(self, combine, initial=initial)

    def collect(self) -> LazyCoroResult[list[T], E]:
        from .collection import collect
        return collect(self)

    def drain_into(self, sink: Sink[T]) -> LazyCoroResult[int, E | SinkError]:
        from .sink import drain
        return drain(self, sink)


def concat[T, E](*streams: Stream[T, E]) -> Stream[T, E]:
    """
    Sequential concatenation: every event of streams[0], then streams[1], ...

    The next stream is subscribed only after the previous one ended.
    Failures are forwarded as they come; the consumer decides whether to
    keep pulling.
    """
    return Stream(lambda: _ConcatSubscription(streams))


__all__ = ("Stream", "Subscription", "concat")
