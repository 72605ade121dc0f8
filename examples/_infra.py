from __future__ import annotations

import asyncio
import sys
from collections.abc import AsyncIterator, Callable, Coroutine
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from async_expand import Stream  # noqa: E402


def ticking[T](*values: T, every: float) -> Stream[T, Exception]:
    """Stream that waits `every` seconds before each value."""

    async def source() -> AsyncIterator[T]:
        for value in values:
            await asyncio.sleep(every)
            yield value

    return Stream.from_async(source)


def banner(title: str) -> None:  # pragma: no cover (examples only)
    print(f"\n== {title} ==")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:  # pragma: no cover (examples only)
    asyncio.run(main())
