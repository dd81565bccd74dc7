"""Count lines, words and bytes."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import IO, Optional, Sequence, TextIO, Union

# NUL separates words as well as the usual blanks.
_WORD = re.compile(rb"[^ \r\t\n\v\0]+")


@dataclass(frozen=True)
class Counts:
    """Line, word and byte counts."""

    lines: int = 0
    words: int = 0
    chars: int = 0


def count(data: Union[bytes, bytearray, str]) -> Counts:
    """Count the lines, words and bytes of ``data``."""
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    return Counts(
        lines=raw.count(b"\n"),
        words=sum(1 for _ in _WORD.finditer(raw)),
        chars=len(raw),
    )


def wc(stream: IO, name: str, out: TextIO) -> Counts:
    """Count the contents of ``stream`` and write one report line to ``out``."""
    counts = count(stream.read())
    out.write(f"{counts.lines} {counts.words} {counts.chars} {name}\n")
    return counts


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run wc on the named files, or on standard input."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        if not args:
            wc(sys.stdin.buffer, "", sys.stdout)
            return 0
        for name in args:
            try:
                stream = open(name, "rb")
            except OSError:
                sys.stdout.write(f"wc: cannot open {name}\n")
                return 1
            with stream:
                wc(stream, name, sys.stdout)
    except OSError:
        sys.stdout.write("wc: read error\n")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())