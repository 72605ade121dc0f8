from .collect import collect
from .fold import fold, reduce

__all__ = (
    "collect",
    "fold",
    "reduce",
)
