"""String and input helpers of the user library."""

from __future__ import annotations

from typing import AnyStr, IO, Union

_Bytesish = Union[str, bytes, bytearray]


def _as_cstring(value: _Bytesish) -> bytes:
    data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
    end = data.find(b"\0")
    return data if end < 0 else data[:end]


def _as_bytes(value: _Bytesish) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


def atoi(s: _Bytesish) -> int:
    """Value of the leading decimal digits of ``s``; 0 if there are none.

    Signs and leading blanks are not recognised.
    """
    n = 0
    for byte in _as_bytes(s):
        if not 0x30 <= byte <= 0x39:
            break
        n = n * 10 + byte - 0x30
    return n


def strcmp(a: _Bytesish, b: _Bytesish) -> int:
    """Difference of the first differing bytes of two NUL-terminated strings."""
    left = _as_cstring(a)
    right = _as_cstring(b)
    for x, y in zip(left, right):
        if x != y:
            return x - y
    if len(left) == len(right):
        return 0
    return left[len(right)] if len(left) > len(right) else -right[len(left)]


def memcmp(a: _Bytesish, b: _Bytesish, n: int) -> int:
    """Difference of the first differing bytes among the first ``n`` bytes."""
    left = _as_bytes(a)
    right = _as_bytes(b)
    if n < 0:
        raise ValueError("length must not be negative")
    if len(left) < n or len(right) < n:
        raise ValueError(f"both buffers must hold at least {n} bytes")
    for x, y in zip(left[:n], right[:n]):
        if x != y:
            return x - y
    return 0


def gets(stream: IO[AnyStr], max_len: int) -> AnyStr:
    """Read one line of at most ``max_len - 1`` characters.

    Reading stops after a newline or carriage return, which is kept, or at
    end of input.
    """
    parts = []
    empty = None
    while len(parts) + 1 < max_len:
        c = stream.read(1)
        empty = c[:0]
        if not c:
            break
        parts.append(c)
        if c in ("\n", "\r", b"\n", b"\r"):
            break
    if empty is None:
        return ""  # type: ignore[return-value]
    return empty.join(parts)