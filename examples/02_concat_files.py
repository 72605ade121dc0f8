from __future__ import annotations

import tempfile
from pathlib import Path

from _infra import banner, run

from async_expand import FileSink, Stream, read_chunks
from kungfu import Error, Ok


def read_announced(path: Path) -> Stream[bytes, OSError]:
    print(f"Reading file: {path.name}")
    return read_chunks(path)


async def main() -> None:
    banner("02_concat_files: read files sequentially into one sink")

    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        paths = []
        for index in range(1, 4):
            path = root / f"file{index}.txt"
            path.write_text(f"contents of file {index}\n")
            paths.append(path)
        output = root / "combined_output.txt"

        result = await Stream.from_iterable(paths).expand(read_announced).drain_into(FileSink(output))

        match result:
            case Ok(chunks):
                print(f"All files have been read ({chunks} chunks) and written to {output.name}")
                print(output.read_text(), end="")
            case Error(err):
                print(f"Error occurred: {err!r}")


if __name__ == "__main__":
    run(main)
