"""
Log - Моноидный аккумулятор для Writer
======================================
"""

from __future__ import annotations


class Log[A](list[A]):
    """
    Append-only record of what happened during a run.

    flatten keeps one of these per subscription with a Recovered entry
    for every error it did not abort on.

    Monoid: Log() is the identity, combine() concatenates.
    """

    @staticmethod
    def of[T](*items: T) -> Log[T]:
        """Create log with items."""
        return Log[T](items)

    def combine(self, other: Log[A], /) -> Log[A]:
        """
        Combine two logs without touching either.

        Example:
            Log.of("a", "b").combine(Log.of("c"))  # Log(["a", "b", "c"])
        """
        result: Log[A] = Log(self)
        result.extend(other)
        return result


__all__ = ("Log",)
