from __future__ import annotations

import typing


class OuterSourceError(Exception):
    """Outer stream failed while being pulled."""

    cause: object

    def __init__(self, cause: object) -> None:
        self.cause = cause
        super().__init__(f"Outer source failed: {cause!r}")


class InnerSequenceError(Exception):
    """Inner stream of `item` failed while being pulled (or could not be created)."""

    cause: object
    item: object

    def __init__(self, cause: object, item: object) -> None:
        self.cause = cause
        self.item = item
        super().__init__(f"Inner sequence for {item!r} failed: {cause!r}")


class EmptySequenceError(Exception):
    """reduce() reached End before any Data."""

    def __init__(self) -> None:
        super().__init__("Cannot reduce an empty sequence")


class SinkError(Exception):
    """Sink could not append, flush or close."""

    operation: str
    cause: BaseException | None

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Sink {operation} failed{detail}")


class TimeoutError(Exception):
    """Inner stream missed its deadline."""

    seconds: float

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        super().__init__(f"Timed out after {seconds}s")


class SubscriptionClosedError(Exception):
    """Pulled a subscription that was cancelled."""

    state: typing.Any

    def __init__(self, state: typing.Any) -> None:
        self.state = state
        super().__init__(f"Subscription is closed (state: {state})")


class StreamFailedError(Exception):
    """Stream failed with a cause that is not an exception itself."""

    cause: object

    def __init__(self, cause: object) -> None:
        self.cause = cause
        super().__init__(f"Stream failed: {cause!r}")


__all__ = (
    "EmptySequenceError",
    "InnerSequenceError",
    "OuterSourceError",
    "SinkError",
    "StreamFailedError",
    "SubscriptionClosedError",
    "TimeoutError",
)
