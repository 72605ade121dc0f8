from .decision import (
    Abort,
    RecoveryDecision,
    Skip,
    SubstituteAndAbandonSequence,
    SubstituteAndContinueSameSequence,
)
from .policy import (
    AbandonAndContinue,
    AbortOnError,
    RecoverWith,
    RecoveryPolicy,
    SkipSilently,
    SplitPolicy,
    SubstituteAndResume,
)

__all__ = (
    # Decisions
    "Abort",
    "RecoveryDecision",
    "Skip",
    "SubstituteAndAbandonSequence",
    "SubstituteAndContinueSameSequence",
    # Policies
    "AbandonAndContinue",
    "AbortOnError",
    "RecoverWith",
    "RecoveryPolicy",
    "SkipSilently",
    "SplitPolicy",
    "SubstituteAndResume",
)
