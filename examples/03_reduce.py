from __future__ import annotations

import operator

from _infra import banner, run, ticking

from async_expand import EmptySequenceError, Stream
from kungfu import Error, Ok

NUMBERS = (17, 32, 40, 32, 1, 23, -23, 43, 0, 1, 21, 33)


async def main() -> None:
    banner("03_reduce: sum a stream of numbers")

    total = await ticking(*NUMBERS, every=0.03).reduce(operator.add)
    match total:
        case Ok(value):
            print(f"The total sum is: {value}")
        case Error(err):
            print(f"error: {err!r}")

    empty = await Stream.empty().reduce(operator.add)
    match empty:
        case Error(EmptySequenceError() as err):
            print(f"empty stream: {err}")
        case _:
            print(f"unexpected: {empty!r}")


if __name__ == "__main__":
    run(main)
