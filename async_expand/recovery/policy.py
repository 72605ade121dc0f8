"""
Recovery policies
=================

Стратегии восстановления для flatten: что делать, когда падает внешний
или внутренний стрим.

Every policy answers two questions:
- on_outer_error(OuterSourceError) -> RecoveryDecision
- on_inner_error(InnerSequenceError) -> RecoveryDecision

The outer stream carries no data to substitute into, so flatten treats any
outer decision other than Abort as Abort. Write your own policy by
implementing both methods; RecoverWith covers the common case.
"""

from __future__ import annotations

import typing
from collections.abc import Callable
from dataclasses import dataclass

from .._errors import InnerSequenceError, OuterSourceError
from .._types import Predicate
from .decision import (
    Abort,
    RecoveryDecision,
    Skip,
    SubstituteAndAbandonSequence,
    SubstituteAndContinueSameSequence,
)


class RecoveryPolicy[T](typing.Protocol):
    """Strategy consulted by flatten on every failure."""

    def on_outer_error(self, error: OuterSourceError, /) -> RecoveryDecision[T, object]: ...

    def on_inner_error(self, error: InnerSequenceError, /) -> RecoveryDecision[T, object]: ...


def _should_recover(recover_on: Predicate[InnerSequenceError] | None, error: InnerSequenceError) -> bool:
    if recover_on is not None and not recover_on(error):
        return False
    return True


@dataclass(frozen=True, slots=True)
class AbortOnError:
    """No recovery: every failure ends the flatten."""

    def on_outer_error(self, error: OuterSourceError, /) -> RecoveryDecision[typing.Never, object]:
        return Abort(error)

    def on_inner_error(self, error: InnerSequenceError, /) -> RecoveryDecision[typing.Never, object]:
        return Abort(error)


@dataclass(frozen=True, slots=True)
class AbandonAndContinue[T]:
    """
    Emit `substitute` for the failed inner stream and move to the next outer item.

    Whatever the failed stream had left is never pulled.
    """

    substitute: T
    recover_on: Predicate[InnerSequenceError] | None = None

    def on_outer_error(self, error: OuterSourceError, /) -> RecoveryDecision[T, object]:
        return Abort(error)

    def on_inner_error(self, error: InnerSequenceError, /) -> RecoveryDecision[T, object]:
        if not _should_recover(self.recover_on, error):
            return Abort(error)
        return SubstituteAndAbandonSequence(self.substitute)


@dataclass(frozen=True, slots=True)
class SubstituteAndResume[T]:
    """Emit `substitute` in place of the failure and keep pulling the same inner stream."""

    substitute: T
    recover_on: Predicate[InnerSequenceError] | None = None

    def on_outer_error(self, error: OuterSourceError, /) -> RecoveryDecision[T, object]:
        return Abort(error)

    def on_inner_error(self, error: InnerSequenceError, /) -> RecoveryDecision[T, object]:
        if not _should_recover(self.recover_on, error):
            return Abort(error)
        return SubstituteAndContinueSameSequence(self.substitute)


@dataclass(frozen=True, slots=True)
class SkipSilently:
    """Drop the failed inner stream, emit nothing. The failure still reaches the observer."""

    recover_on: Predicate[InnerSequenceError] | None = None

    def on_outer_error(self, error: OuterSourceError, /) -> RecoveryDecision[typing.Never, object]:
        return Abort(error)

    def on_inner_error(self, error: InnerSequenceError, /) -> RecoveryDecision[typing.Never, object]:
        if not _should_recover(self.recover_on, error):
            return Abort(error)
        return Skip()


@dataclass(frozen=True, slots=True)
class SplitPolicy[T]:
    """Pick outer-level and inner-level behaviour independently."""

    outer: RecoveryPolicy[T]
    inner: RecoveryPolicy[T]

    def on_outer_error(self, error: OuterSourceError, /) -> RecoveryDecision[T, object]:
        return self.outer.on_outer_error(error)

    def on_inner_error(self, error: InnerSequenceError, /) -> RecoveryDecision[T, object]:
        return self.inner.on_inner_error(error)


@dataclass(frozen=True, slots=True)
class RecoverWith[T]:
    """
    Custom inner recovery from a function.

    Example:
        RecoverWith(lambda e: Skip() if isinstance(e.cause, KeyError) else Abort(e))
    """

    handler: Callable[[InnerSequenceError], RecoveryDecision[T, object]]

    def on_outer_error(self, error: OuterSourceError, /) -> RecoveryDecision[T, object]:
        return Abort(error)

    def on_inner_error(self, error: InnerSequenceError, /) -> RecoveryDecision[T, object]:
        return self.handler(error)


__all__ = (
    "RecoveryPolicy",
    "AbortOnError",
    "AbandonAndContinue",
    "SubstituteAndResume",
    "SkipSilently",
    "SplitPolicy",
    "RecoverWith",
)
