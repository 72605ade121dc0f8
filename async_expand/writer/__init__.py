"""
Writer
======

Result + accumulated Log, used for observing recoveries.
"""

from .log import Log
from .monad import LazyCoroResultWriter
from .result import WriterResult

__all__ = (
    "Log",
    "WriterResult",
    "LazyCoroResultWriter",
)
