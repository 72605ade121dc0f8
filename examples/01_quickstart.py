from __future__ import annotations

from _infra import banner, run, ticking

from async_expand import Stream


def characters(word: str) -> Stream[str, Exception]:
    # Nothing is read until flatten subscribes, i.e. after the previous word is done.
    return ticking(*word, every=0.05)


async def main() -> None:
    banner("01_quickstart: words -> characters, one word at a time")

    words = ticking("Driver", "Family", "Program", every=0.1)

    async for char in words.expand(characters):
        print(char)


if __name__ == "__main__":
    run(main)
