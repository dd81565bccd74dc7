"""Concatenate files to standard output."""

from __future__ import annotations

import sys
from typing import BinaryIO, Optional, Sequence

CHUNK = 512


def cat(stream: BinaryIO, out: BinaryIO) -> None:
    """Copy ``stream`` to ``out``.

    Raises OSError("read error") or OSError("write error") on failure.
    """
    while True:
        try:
            chunk = stream.read(CHUNK)
        except OSError as exc:
            raise OSError("read error") from exc
        if not chunk:
            return
        try:
            written = out.write(chunk)
        except OSError as exc:
            raise OSError("write error") from exc
        if written is not None and written != len(chunk):
            raise OSError("write error")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Copy the named files, or standard input, to standard output."""
    args = list(sys.argv[1:] if argv is None else argv)
    out = sys.stdout.buffer
    try:
        if not args:
            cat(sys.stdin.buffer, out)
            return 0
        for name in args:
            try:
                stream = open(name, "rb")
            except OSError:
                sys.stderr.write(f"cat: cannot open {name}\n")
                return 1
            with stream:
                cat(stream, out)
    except OSError as exc:
        sys.stderr.write(f"cat: {exc}\n")
        return 1
    finally:
        out.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())