"""Several workers writing and reading back files at once, and a line reader."""

from __future__ import annotations

import os
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Sequence, TextIO, Union

WORKERS = 5
ROUNDS = 20
BLOCK = b"a" * 512
LINE_LIMIT = 32

_PathLike = Union[str, "os.PathLike[str]"]


def _path_for(directory: _PathLike, index: int) -> Path:
    if index < 0:
        raise ValueError("index must not be negative")
    return Path(directory) / ("stressfs" + chr(ord("0") + index))


def _write_file(path: Path, rounds: int, block: bytes) -> None:
    fd = os.open(path, os.O_CREAT | os.O_RDWR, 0o666)
    with os.fdopen(fd, "r+b") as stream:
        for _ in range(rounds):
            stream.write(block)


def _read_file(path: Path, rounds: int, size: int) -> int:
    total = 0
    with open(path, "rb") as stream:
        for _ in range(rounds):
            total += len(stream.read(size))
    return total


def stress_file(
    directory: _PathLike, index: int, rounds: int = ROUNDS, block: bytes = BLOCK
) -> Path:
    """Write ``block`` ``rounds`` times to file ``stressfs<index>``, then read it back.

    The file is not truncated first.  Returns its path.
    """
    path = _path_for(directory, index)
    _write_file(path, rounds, block)
    _read_file(path, rounds, len(block))
    return path


def receive_line(stream: TextIO, limit: int = LINE_LIMIT) -> str:
    """Read up to a newline, keeping at most ``limit - 1`` characters.

    The result always ends in a newline, also when input ends first.
    """
    kept = []
    while True:
        c = stream.read(1)
        if not c or c == "\n":
            break
        if len(kept) + 1 < limit:
            kept.append(c)
    return "".join(kept) + "\n"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the workers in the given directory, or the current one."""
    args = list(sys.argv[1:] if argv is None else argv)
    directory = Path(args[0]) if args else Path(".")
    lock = threading.Lock()

    def say(text: str) -> None:
        with lock:
            sys.stdout.write(text)

    def worker(index: int) -> None:
        say(f"write {index}\n")
        path = _path_for(directory, index)
        _write_file(path, ROUNDS, BLOCK)
        say("read\n")
        _read_file(path, ROUNDS, len(BLOCK))

    say("stressfs starting\n")
    try:
        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(pool.map(worker, range(WORKERS)))
    except OSError as exc:
        sys.stderr.write(f"stressfs: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())