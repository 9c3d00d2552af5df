"""
Seeded xorshift32 stream.

Every stochastic decision in the simulation (tile draws, agent focus
scoring, tech requirement generation) pulls from an instance of
DeterministicRandom. Same seed + same call sequence gives a bit-identical
sequence, which is what makes whole sessions replayable in tests.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

_MASK32 = 0xFFFFFFFF
_ZERO_STATE_REPLACEMENT = 0x9E3779B9
_TWO_POW_32 = float(1 << 32)


def _to_int32(value: int) -> int:
    """Wrap an arbitrary Python int to a signed 32-bit value."""
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


def fold_seed(seed: int | str) -> int:
    """Fold an integer or string seed into an unsigned 32-bit state."""
    if isinstance(seed, str):
        h = 0
        for ch in seed:
            h = _to_int32((h << 5) - h + ord(ch))
        return h & _MASK32
    return int(seed) & _MASK32


class DeterministicRandom:
    """Reproducible float/int stream from a single integer or string seed."""

    def __init__(self, seed: int | str):
        self.seed = seed
        self._state = fold_seed(seed) or _ZERO_STATE_REPLACEMENT

    @property
    def state(self) -> int:
        return self._state

    def next(self) -> float:
        """Advance the stream and return a float in [0, 1)."""
        x = self._state
        x ^= (x << 13) & _MASK32
        x ^= x >> 17
        x ^= (x << 5) & _MASK32
        self._state = x & _MASK32
        return self._state / _TWO_POW_32

    def int_between(self, lo: int, hi: int) -> int:
        """Inclusive integer in [lo, hi]."""
        return math.floor(self.next() * (hi - lo + 1)) + lo

    def pick(self, values: Sequence[Any]) -> Any:
        if not values:
            raise ValueError("Cannot pick from an empty sequence")
        return values[math.floor(self.next() * len(values))]

    def __repr__(self) -> str:
        return f"DeterministicRandom(seed={self.seed!r}, state=0x{self._state:08x})"
