"""
Deterministic pseudorandom number generator for world generation.

Mulberry32 is used so that two independent implementations given the same seed
produce the same sequence. Python's random and NumPy's random must not be
used in generation code.
"""

import math
from typing import List, MutableSequence, Sequence, TypeVar, Union

import numpy as np

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
MULBERRY_INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296.0
FORK_MODULUS = 2147483647


def _uint32(n: int) -> int:
    """Convert to unsigned 32-bit integer."""
    return n & MASK32


def _imul(a: int, b: int) -> int:
    """32-bit integer multiply keeping the low 32 bits (JavaScript Math.imul)."""
    return (a * b) & MASK32


def hash_seed(seed: str) -> int:
    """
    Hash a string seed to a non-zero 32-bit state.

    Rolling ``h = h * 31 + unit`` over UTF-16 code units, read back as a
    signed 32-bit value and made positive.
    """
    h = 0
    data = seed.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = _uint32(h * 31 + unit)
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h) or 1


class Mulberry32PRNG:
    """
    Mulberry32 generator with forkable sub-streams.

    The state advances by 0x6D2B79F5 (mod 2^32) per draw, and the output is
    mixed by two xor-shift/multiply rounds.
    """

    def __init__(self, seed: Union[str, int, float]):
        """Initialize with a seed string or number."""
        self.call_count = 0

        if isinstance(seed, str):
            state = hash_seed(seed)
        else:
            state = _uint32(int(seed))
        self.state = state or 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        self.state = _uint32(self.state + MULBERRY_INCREMENT)
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= _uint32(t + _imul(t ^ (t >> 7), t | 61))
        return _uint32(t ^ (t >> 14)) / TWO_POW_32

    next = random

    def uniform(self, min_val: float, max_val: float) -> float:
        """Random float in [min_val, max_val)."""
        return min_val + self.random() * (max_val - min_val)

    def randint(self, min_val: int, max_val: int) -> int:
        """Random integer in [min_val, max_val] inclusive."""
        return int(math.floor(self.uniform(min_val, max_val + 1)))

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        return self.random() < probability

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        """Shuffle a sequence in place (Fisher-Yates from the end) and return it."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.random() * (i + 1))
            items[i], items[j] = items[j], items[i]
        return items

    def gaussian(self, mean: float = 0.0, std_dev: float = 1.0) -> float:
        """Normally distributed value via Box-Muller from two draws."""
        u1 = self.random()
        u2 = self.random()
        # log(0) is undefined; the smallest possible non-zero draw stands in
        u1 = u1 or 1.0 / TWO_POW_32
        z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return z0 * std_dev + mean

    def random_array(self, n: int) -> np.ndarray:
        """Return ``n`` sequential draws as a float64 array."""
        values: List[float] = [self.random() for _ in range(n)]
        return np.asarray(values, dtype=np.float64)

    def fork(self) -> "Mulberry32PRNG":
        """Create an independent generator seeded from one draw of this one."""
        return Mulberry32PRNG(int(math.floor(self.random() * FORK_MODULUS)))
