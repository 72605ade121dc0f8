"""
async_expand: sequential flattening of async streams with error recovery.

Map every item of an outer stream to an inner stream and forward the inner
streams one at a time, in order, with a pluggable policy for failures.

Architecture:
- Stream / Subscription: lazy, pull-based sequence of Data / Failure / End events
- flatten (Stream.expand): the sequential flattener, one inner stream in flight
- recovery: RecoveryPolicy strategies returning RecoveryDecision values
- collection: reduce / fold / collect as LazyCoroResult
- sink: drain a stream into a Sink with flush/close exactly once
- writer: Log of recoveries (flatten_w)
"""

# Core types
from ._types import Combine, Mapper, NoError, Observer, Predicate

# Events and streams
from .event import END, Data, End, Event, Failure
from .stream import Stream, Subscription, concat

# Recovery
from . import recovery
from .recovery import (
    Abort,
    AbandonAndContinue,
    AbortOnError,
    RecoverWith,
    RecoveryDecision,
    RecoveryPolicy,
    Skip,
    SkipSilently,
    SplitPolicy,
    SubstituteAndAbandonSequence,
    SubstituteAndContinueSameSequence,
    SubstituteAndResume,
)

# Flattening
from .flatten import Flattener, FlattenerState, Recovered, flatten, flatten_w

# Collection operations
from .collection import collect, fold, reduce

# Sinks
from .sink import BufferSink, Sink, drain
from .files import FileSink, read_chunks

# Writer
from . import writer
from .writer import LazyCoroResultWriter, Log, WriterResult

# Errors
from ._errors import (
    EmptySequenceError,
    InnerSequenceError,
    OuterSourceError,
    SinkError,
    StreamFailedError,
    SubscriptionClosedError,
    TimeoutError,
)

__all__ = (
    # Types
    "Combine",
    "Mapper",
    "NoError",
    "Observer",
    "Predicate",
    # Events
    "END",
    "Data",
    "End",
    "Event",
    "Failure",
    # Streams
    "Stream",
    "Subscription",
    "concat",
    # Recovery
    "recovery",
    "Abort",
    "AbandonAndContinue",
    "AbortOnError",
    "RecoverWith",
    "RecoveryDecision",
    "RecoveryPolicy",
    "Skip",
    "SkipSilently",
    "SplitPolicy",
    "SubstituteAndAbandonSequence",
    "SubstituteAndContinueSameSequence",
    "SubstituteAndResume",
    # Flattening
    "Flattener",
    "FlattenerState",
    "Recovered",
    "flatten",
    "flatten_w",
    # Collection
    "collect",
    "fold",
    "reduce",
    # Sinks
    "BufferSink",
    "FileSink",
    "Sink",
    "drain",
    "read_chunks",
    # Writer
    "writer",
    "LazyCoroResultWriter",
    "Log",
    "WriterResult",
    # Errors
    "EmptySequenceError",
    "InnerSequenceError",
    "OuterSourceError",
    "SinkError",
    "StreamFailedError",
    "SubscriptionClosedError",
    "TimeoutError",
)
