"""A small printf that understands %d, %l, %x, %p, %s, %c and %%."""

from __future__ import annotations

import operator
import sys
from typing import Any, Iterator, TextIO

_DIGITS = "0123456789ABCDEF"
_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF


def _int32(value: int) -> int:
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


def _format_int(value: int, base: int, signed: bool) -> str:
    xx = _int32(value)
    negative = signed and xx < 0
    x = -xx if negative else xx & _MASK32
    digits = []
    while True:
        digits.append(_DIGITS[x % base])
        x //= base
        if x == 0:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def _format_ptr(value: int) -> str:
    return "0x" + format(value & _MASK64, "016X")


def _format_char(value: Any) -> str:
    if isinstance(value, str):
        if len(value) != 1:
            raise TypeError("%c needs a single character")
        return value
    return chr(operator.index(value) & 0xFF)


def _format_str(value: Any) -> str:
    if value is None:
        return "(null)"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return str(value)


def _next(args: Iterator[Any]) -> Any:
    try:
        return next(args)
    except StopIteration:
        raise TypeError("not enough arguments for format string") from None


def format_string(fmt: str, *args: Any) -> str:
    """Render ``fmt`` with ``args``.

    %d is a signed 32-bit integer, %l and %x are unsigned 32-bit, %p is a
    64-bit pointer in upper-case hex.  Unknown conversions are copied through.
    """
    values = iter(args)
    out = []
    pending = False
    for c in fmt:
        if not pending:
            if c == "%":
                pending = True
            else:
                out.append(c)
            continue
        pending = False
        if c == "d":
            out.append(_format_int(operator.index(_next(values)), 10, True))
        elif c == "l":
            out.append(_format_int(operator.index(_next(values)), 10, False))
        elif c == "x":
            out.append(_format_int(operator.index(_next(values)), 16, False))
        elif c == "p":
            out.append(_format_ptr(operator.index(_next(values))))
        elif c == "s":
            out.append(_format_str(_next(values)))
        elif c == "c":
            out.append(_format_char(_next(values)))
        elif c == "%":
            out.append("%")
        else:
            out.append("%" + c)
    return "".join(out)


def fprintf(stream: TextIO, fmt: str, *args: Any) -> None:
    """Write the formatted text to ``stream``."""
    stream.write(format_string(fmt, *args))


def printf(fmt: str, *args: Any) -> None:
    """Write the formatted text to standard output."""
    fprintf(sys.stdout, fmt, *args)