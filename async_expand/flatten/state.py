from __future__ import annotations

import enum


class FlattenerState(enum.Enum):
    """
    Where a Flattener is in its single run.

    IDLE -> AWAITING_OUTER <-> CONSUMING_INNER -> DRAINING -> COMPLETED | FAILED | CANCELLED

    DRAINING is the short step where subscriptions are released before the
    terminal state is entered.
    """

    IDLE = "idle"
    AWAITING_OUTER = "awaiting_outer"
    CONSUMING_INNER = "consuming_inner"
    DRAINING = "draining"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({FlattenerState.COMPLETED, FlattenerState.FAILED, FlattenerState.CANCELLED})


__all__ = ("FlattenerState",)
