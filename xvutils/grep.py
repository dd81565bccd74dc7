"""Print the lines of the input that match a simple regular expression.

Only ``^``, ``.``, ``*`` and ``$`` are special.
"""

from __future__ import annotations

import sys
from typing import Optional, Sequence, TextIO

BUF_SIZE = 1024  # a line of BUF_SIZE - 1 characters or more ends the search


def match(pattern: str, text: str) -> bool:
    """True if ``pattern`` matches anywhere in ``text``."""
    if pattern.startswith("^"):
        return _matchhere(pattern, 1, text, 0)
    for start in range(len(text) + 1):  # must look at the empty string too
        if _matchhere(pattern, 0, text, start):
            return True
    return False


def _matchhere(pattern: str, ri: int, text: str, ti: int) -> bool:
    """Match ``pattern[ri:]`` at the beginning of ``text[ti:]``."""
    while True:
        if ri == len(pattern):
            return True
        if ri + 1 < len(pattern) and pattern[ri + 1] == "*":
            return _matchstar(pattern[ri], pattern, ri + 2, text, ti)
        if pattern[ri] == "$" and ri + 1 == len(pattern):
            return ti == len(text)
        if ti < len(text) and pattern[ri] in (".", text[ti]):
            ri += 1
            ti += 1
            continue
        return False


def _matchstar(c: str, pattern: str, ri: int, text: str, ti: int) -> bool:
    """Match ``c*`` followed by ``pattern[ri:]`` at the beginning of ``text[ti:]``."""
    while True:
        if _matchhere(pattern, ri, text, ti):
            return True
        if ti >= len(text) or not (text[ti] == c or c == "."):
            return False
        ti += 1


def grep(pattern: str, stream: TextIO, out: TextIO) -> int:
    """Copy every newline-terminated line of ``stream`` that matches to ``out``.

    A final line without a newline is not examined.  Returns the number of
    lines written.
    """
    written = 0
    pending = ""
    while True:
        room = BUF_SIZE - 1 - len(pending)
        if room <= 0:
            break
        chunk = stream.read(room)
        if not chunk:
            break
        pending += chunk
        *lines, pending = pending.split("\n")
        for line in lines:
            if match(pattern, line):
                out.write(line + "\n")
                written += 1
    return written


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run grep on the arguments (pattern first, then files)."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern, *files = args
    if not files:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for name in files:
        try:
            stream = open(name, encoding="utf-8", errors="replace", newline="")
        except OSError:
            sys.stdout.write(f"grep: cannot open {name}\n")
            return 1
        with stream:
            grep(pattern, stream, sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())