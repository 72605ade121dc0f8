from .flattener import Flattener, flatten
from .observe import Recovered
from .state import FlattenerState
from .writer import flatten_w

__all__ = (
    "Flattener",
    "FlattenerState",
    "Recovered",
    "flatten",
    "flatten_w",
)
