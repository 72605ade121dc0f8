"""
Recovery decisions
==================

What a RecoveryPolicy answers after a failure. Plain values, so substitution
is expressed the same way by every policy.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Abort[E]:
    """Forward `cause` as the terminal failure."""

    cause: E


@dataclass(frozen=True, slots=True)
class SubstituteAndContinueSameSequence[T]:
    """Emit `value`, keep pulling the failed inner stream."""

    value: T


@dataclass(frozen=True, slots=True)
class SubstituteAndAbandonSequence[T]:
    """Emit `value`, drop the failed inner stream, move to the next outer item."""

    value: T


@dataclass(frozen=True, slots=True)
class Skip:
    """Drop the failed inner stream without emitting anything."""


type RecoveryDecision[T, E] = (
    Abort[E]
    | SubstituteAndContinueSameSequence[T]
    | SubstituteAndAbandonSequence[T]
    | Skip
)


__all__ = (
    "Abort",
    "SubstituteAndContinueSameSequence",
    "SubstituteAndAbandonSequence",
    "Skip",
    "RecoveryDecision",
)
