from __future__ import annotations

from dataclasses import dataclass

from .._errors import InnerSequenceError
from ..recovery import RecoveryDecision


@dataclass(frozen=True, slots=True)
class Recovered[T, E]:
    """An inner failure flatten recovered from, and how."""

    error: InnerSequenceError
    decision: RecoveryDecision[T, E]

    @property
    def item(self) -> object:
        """Outer item whose inner stream failed."""
        return self.error.item


__all__ = ("Recovered",)
