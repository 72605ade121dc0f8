from __future__ import annotations

from collections.abc import AsyncIterator

from _infra import banner, run

from async_expand import (
    AbandonAndContinue,
    AbortOnError,
    Data,
    Event,
    Failure,
    RecoveryPolicy,
    SkipSilently,
    Stream,
    SubstituteAndResume,
    flatten_w,
)
from kungfu import Error, Ok


def faulty_numbers(_: str) -> Stream[int, Exception]:
    """1..5 with a failure in place of 3."""

    async def events() -> AsyncIterator[Event[int, Exception]]:
        for i in range(1, 6):
            if i == 3:
                yield Failure(Exception(f"An error occurred at number {i}"))
            else:
                yield Data(i)

    return Stream.from_events(events)


async def show(name: str, policy: RecoveryPolicy[int]) -> None:
    wr = await flatten_w(Stream.of("first", "second"), faulty_numbers, policy=policy)
    match wr.result:
        case Ok(values):
            print(f"{name:>20}: {values}")
        case Error(err):
            print(f"{name:>20}: error {err}")
    for record in wr.log:
        print(f"{'':>20}  recovered {record.item!r}: {record.error.cause}")


async def main() -> None:
    banner("04_recovery: the same failure under each policy")

    await show("abort", AbortOnError())
    await show("abandon + continue", AbandonAndContinue(-1))
    await show("substitute + resume", SubstituteAndResume(-1))
    await show("skip silently", SkipSilently())

    banner("04_recovery: generator delegation as concatenation")
    combined = Stream.of(0).then(Stream.of(1, 2, 3), Stream.of(4, 5, 6))
    print([n async for n in combined])


if __name__ == "__main__":
    run(main)
