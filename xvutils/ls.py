"""List files and directories."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence, TextIO

from xvutils.params import FileType, Stat

DIRSIZ = 14  # width of a directory entry name
PATH_BUF = 512


def fmtname(path: str) -> str:
    """The last component of ``path``, padded with blanks to DIRSIZ."""
    name = path.rsplit("/", 1)[-1]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def _stat(path: str) -> Stat:
    return Stat.from_os_stat(os.stat(path))


def _line(path: str, st: Stat) -> str:
    return f"{fmtname(path)} {int(st.type)} {st.ino} {st.size}\n"


def ls(path: str, out: TextIO, err: TextIO) -> None:
    """List ``path``: one line for a file, one per entry for a directory."""
    try:
        st = _stat(path)
    except OSError:
        err.write(f"ls: cannot open {path}\n")
        return
    if st.type != FileType.DIR:
        out.write(_line(path, st))
        return
    if len(path) + 1 + DIRSIZ + 1 > PATH_BUF:
        out.write("ls: path too long\n")
        return
    try:
        names = sorted(os.listdir(path))
    except OSError:
        err.write(f"ls: cannot open {path}\n")
        return
    for name in [".", "..", *names]:
        entry = f"{path}/{name}"
        try:
            entry_st = _stat(entry)
        except OSError:
            out.write(f"ls: cannot stat {entry}\n")
            continue
        out.write(_line(entry, entry_st))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """List each named path, or the current directory."""
    args = list(sys.argv[1:] if argv is None else argv)
    for path in args or ["."]:
        ls(path, sys.stdout, sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())