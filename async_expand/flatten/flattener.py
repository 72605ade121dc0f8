"""
Sequential flattener
====================

Map each outer item to an inner stream and forward the inner streams one
at a time, in order. The next outer item is not pulled until the current
inner stream has ended (or been dropped by the recovery policy), so at
most one inner subscription is ever alive.

Every failure goes through the RecoveryPolicy:

    outer Failure  -> on_outer_error  -> Abort (anything else counts as Abort)
    inner Failure  -> on_inner_error  -> Abort | substitute (+ continue | abandon) | Skip
"""

from __future__ import annotations

import asyncio
import typing

from .._errors import InnerSequenceError, OuterSourceError, SubscriptionClosedError, TimeoutError
from .._types import Mapper, Observer
from ..event import END, Data, End, Event, Failure
from ..recovery import (
    Abort,
    AbortOnError,
    RecoveryPolicy,
    Skip,
    SubstituteAndAbandonSequence,
    SubstituteAndContinueSameSequence,
)
from ..stream import Stream, Subscription
from ..writer import Log
from .observe import Recovered
from .state import FlattenerState


def _check_timeout(timeout: float | None) -> None:
    if timeout is not None and timeout <= 0.0:
        raise ValueError("timeout must be > 0")


async def _safe_pull[T, E](subscription: Subscription[T, E]) -> Event[T, E | Exception]:
    try:
        return await subscription.pull()
    except Exception as exc:
        return Failure(exc)


class Flattener[O, I]:
    """
    One run of flatten(). Also the Subscription handed out by the flattened Stream.

    Single use: once COMPLETED or FAILED, every further pull returns END.
    Pulling a CANCELLED flattener raises SubscriptionClosedError.
    """

    __slots__ = (
        "_outer",
        "_mapper",
        "_policy",
        "_timeout",
        "_observer",
        "_state",
        "_outer_sub",
        "_inner",
        "_item",
        "_deadline",
        "_spent",
        "_failure",
        "_log",
    )

    def __init__(
        self,
        outer: Stream[O, typing.Any],
        mapper: Mapper[O, I, typing.Any],
        *,
        policy: RecoveryPolicy[I],
        timeout: float | None = None,
        observer: Observer | None = None,
    ) -> None:
        _check_timeout(timeout)
        self._outer = outer
        self._mapper = mapper
        self._policy = policy
        self._timeout = timeout
        self._observer = observer

        self._state = FlattenerState.IDLE
        self._outer_sub: Subscription[O, typing.Any] | None = None
        self._inner: Subscription[I, typing.Any] | None = None
        self._item: O | None = None
        self._deadline: float | None = None
        self._spent = False
        self._failure: object | None = None
        self._log: Log[Recovered[I, object]] = Log()

    @property
    def state(self) -> FlattenerState:
        return self._state

    @property
    def active(self) -> Subscription[I, typing.Any] | None:
        """Inner subscription being consumed, if any."""
        return self._inner

    @property
    def failure(self) -> object | None:
        """Cause forwarded with the terminal Failure."""
        return self._failure

    @property
    def log(self) -> Log[Recovered[I, object]]:
        """Every recovery made so far, in order."""
        return self._log

    # Subscription protocol

    async def pull(self) -> Event[I, object]:
        if self._state in (FlattenerState.COMPLETED, FlattenerState.FAILED):
            return END
        self._ensure_open()
        if self._state is FlattenerState.IDLE:
            self._outer_sub = self._outer.subscribe()
            self._state = FlattenerState.AWAITING_OUTER

        while True:
            if self._inner is None:
                event = await self._pull_outer()
                self._ensure_open()
                match event:
                    case Data(item):
                        error = self._activate(item)
                        if error is not None:
                            emitted = await self._recover(error)
                            if emitted is not None:
                                return emitted
                    case Failure(cause):
                        return await self._fail_outer(OuterSourceError(cause))
                    case End():
                        await self._finish(FlattenerState.COMPLETED)
                        return END
            else:
                event = await self._pull_inner()
                self._ensure_open()
                match event:
                    case Data():
                        return event
                    case End():
                        await self._deactivate()
                    case Failure(cause):
                        emitted = await self._recover(InnerSequenceError(cause, self._item))
                        if emitted is not None:
                            return emitted

    async def release(self) -> None:
        await self.cancel()

    async def cancel(self) -> None:
        """
        Stop now: release the active inner stream and the outer stream,
        forward nothing more. No-op once terminal.
        """
        if self._state.is_terminal or self._state is FlattenerState.DRAINING:
            return
        await self._finish(FlattenerState.CANCELLED)

    # Outer side

    async def _pull_outer(self) -> Event[O, object]:
        assert self._outer_sub is not None
        return await _safe_pull(self._outer_sub)

    async def _fail_outer(self, error: OuterSourceError) -> Event[I, object]:
        decision = self._policy.on_outer_error(error)
        match decision:
            case Abort(cause):
                return await self._fail(cause)
            case _:
                # nothing to substitute into
                return await self._fail(error)

    # Inner side

    def _activate(self, item: O) -> InnerSequenceError | None:
        self._item = item
        try:
            self._inner = self._mapper(item).subscribe()
        except Exception as exc:
            return InnerSequenceError(exc, item)
        self._state = FlattenerState.CONSUMING_INNER
        self._spent = False
        if self._timeout is not None:
            self._deadline = asyncio.get_running_loop().time() + self._timeout
        return None

    async def _pull_inner(self) -> Event[I, object]:
        assert self._inner is not None
        if self._deadline is None:
            return await self._guarded_pull()

        remaining = self._deadline - asyncio.get_running_loop().time()
        if remaining > 0.0:
            try:
                return await asyncio.wait_for(self._guarded_pull(), timeout=remaining)
            except asyncio.TimeoutError:
                pass
        self._spent = True
        return Failure(TimeoutError(typing.cast(float, self._timeout)))

    async def _guarded_pull(self) -> Event[I, object]:
        assert self._inner is not None
        try:
            return await self._inner.pull()
        except Exception as exc:
            # a subscription that raised has no later events
            self._spent = True
            return Failure(exc)

    async def _deactivate(self) -> None:
        inner, self._inner = self._inner, None
        self._item = None
        self._deadline = None
        self._spent = False
        self._state = FlattenerState.AWAITING_OUTER
        if inner is not None:
            await inner.release()

    async def _recover(self, error: InnerSequenceError) -> Event[I, object] | None:
        """Apply the policy to an inner failure. None means: nothing to emit, keep going."""
        decision = self._policy.on_inner_error(error)
        match decision:
            case Abort(cause):
                return await self._fail(cause)
            case SubstituteAndContinueSameSequence(value):
                self._observe(Recovered(error, decision))
                # spent or never created: nothing left to resume
                if self._inner is None or self._spent:
                    await self._deactivate()
                return Data(value)
            case SubstituteAndAbandonSequence(value):
                self._observe(Recovered(error, decision))
                await self._deactivate()
                return Data(value)
            case Skip():
                self._observe(Recovered(error, decision))
                await self._deactivate()
                return None
            case _:
                raise TypeError(f"Unknown recovery decision: {decision!r}")

    def _observe(self, record: Recovered[I, object]) -> None:
        self._log.append(record)
        if self._observer is not None:
            self._observer(record)

    # Terminal transitions

    async def _fail(self, cause: object) -> Event[I, object]:
        self._failure = cause
        await self._finish(FlattenerState.FAILED)
        return Failure(cause)

    async def _finish(self, state: FlattenerState) -> None:
        self._state = FlattenerState.DRAINING
        inner, self._inner = self._inner, None
        outer, self._outer_sub = self._outer_sub, None
        try:
            if inner is not None:
                await inner.release()
        finally:
            try:
                if outer is not None:
                    await outer.release()
            finally:
                self._state = state

    def _ensure_open(self) -> None:
        if self._state.is_terminal or self._state is FlattenerState.DRAINING:
            raise SubscriptionClosedError(self._state)


def flatten[O, I](
    outer: Stream[O, typing.Any],
    mapper: Mapper[O, I, typing.Any],
    *,
    policy: RecoveryPolicy[I] | None = None,
    timeout: float | None = None,
    observer: Observer | None = None,
) -> Stream[I, object]:
    """
    Flatten inner streams strictly in outer order, one at a time.

    Args:
        outer: Stream of items
        mapper: item -> inner Stream (called once per item, when its turn comes)
        policy: What to do on failures (default: AbortOnError)
        timeout: Per-inner-stream deadline in seconds, counted from its subscription
        observer: Called with a Recovered record for every recovered failure

    Every subscription to the result runs its own Flattener.
    """
    _check_timeout(timeout)
    chosen: RecoveryPolicy[I] = policy if policy is not None else AbortOnError()
    return Stream(
        lambda: Flattener(outer, mapper, policy=chosen, timeout=timeout, observer=observer)
    )


__all__ = ("Flattener", "flatten")
