"""Print the arguments separated by blanks."""

from __future__ import annotations

import sys
from typing import Optional, Sequence


def echo(args: Sequence[str]) -> str:
    """The text echo prints for ``args``: nothing at all if there are none."""
    if not args:
        return ""
    return " ".join(args) + "\n"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Write the arguments to standard output."""
    args = list(sys.argv[1:] if argv is None else argv)
    sys.stdout.write(echo(args))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())