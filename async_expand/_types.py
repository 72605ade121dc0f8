"""
Core type definitions for async_expand.

Типы и алиасы используемые по всей библиотеке.
"""

from __future__ import annotations

import typing
from collections.abc import Callable

if typing.TYPE_CHECKING:
    from .flatten.observe import Recovered
    from .stream import Stream

# ============================================================================
# Type aliases
# ============================================================================

# Predicate = function that tests a value
type Predicate[T] = Callable[[T], bool]

# Mapper = outer item -> inner stream
# NOTE: Маппер должен быть чистым: вся работа (I/O и т.п.) начинается
#       только при подписке на возвращённый стрим.
type Mapper[O, I, E] = Callable[[O], Stream[I, E]]

# Combine = left fold step (accumulator, element) -> accumulator
type Combine[A, T] = Callable[[A, T], A]

# Observer = receives every recovered error
type Observer = Callable[[Recovered[typing.Any, typing.Any]], None]

# NoError = stream that never fails
type NoError = typing.Never

__all__ = (
    "Predicate",
    "Mapper",
    "Combine",
    "Observer",
    "NoError",
)
