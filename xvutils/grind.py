"""The Park-Miller "minimal standard" random number generator."""

from __future__ import annotations

from typing import Iterator

_MASK64 = 0xFFFFFFFFFFFFFFFF
_MODULUS = 0x7FFFFFFF  # 2^31 - 1


def do_rand(state: int) -> int:
    """The next value after ``state``, which is also the next state.

    Computes (7^5 * x) mod (2^31 - 1) without overflowing 31 bits, with the
    state moved to [1, 0x7ffffffe] first and the result to [0, 0x7ffffffd].
    """
    x = ((state & _MASK64) % 0x7FFFFFFE) + 1
    hi, lo = divmod(x, 127773)
    x = 16807 * lo - 2836 * hi
    if x < 0:
        x += _MODULUS
    return x - 1


class ParkMiller:
    """A stream of pseudo-random numbers from a 64-bit seed."""

    def __init__(self, seed: int = 1):
        self.state = seed & _MASK64

    def next(self) -> int:
        """Advance and return the next value."""
        self.state = do_rand(self.state)
        return self.state

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.next()