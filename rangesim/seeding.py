"""
Seeded PRNG & Hash Core
=======================
Deterministic building blocks for every sampler in the package:

1. ``string_hash``  — DJB2 accumulation turning text ids into 32-bit seeds.
2. ``combine_seed`` — derives an independent sub-seed per shot or pellet.
3. ``Mulberry32``   — small 32-bit mix-and-xorshift generator.

Same seed ⇒ identical infinite sequence. Different seeds ⇒ practically
independent sequences. Nothing here is suitable for cryptography.
"""

from typing import Callable, Union


MASK32 = 0xFFFFFFFF
GOLDEN_RATIO_32 = 2654435761   # Knuth multiplicative hash constant
PELLET_STRIDE = 15731

SeedLike = Union[int, str]


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply (low word of a*b)."""
    return (a * b) & MASK32


def string_hash(text: str) -> int:
    """
    DJB2 hash of a string, reduced to an unsigned 32-bit integer.

    h₀ = 5381,  hₙ₊₁ = hₙ·33 + ord(c)
    """
    h = 5381
    for ch in text:
        h = ((h << 5) + h + ord(ch)) & MASK32
    return h


def combine_seed(base_seed: int, index: int) -> int:
    """Mix a base seed with a shot/pellet index into a new 32-bit seed."""
    return (base_seed * GOLDEN_RATIO_32 + index * PELLET_STRIDE) & MASK32


def to_seed(seed: SeedLike) -> int:
    """Normalise an int or text seed to an unsigned 32-bit integer."""
    if isinstance(seed, str):
        return string_hash(seed)
    return int(seed) & MASK32


class Mulberry32:
    """
    Mulberry32 generator.

    State is a single 32-bit word advanced by a Weyl increment; each output
    is that word passed through two multiply-xorshift rounds.
    """

    INCREMENT = 0x6D2B79F5

    def __init__(self, seed: SeedLike):
        self.state = to_seed(seed)

    def next_u32(self) -> int:
        self.state = (self.state + self.INCREMENT) & MASK32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        return (t ^ (t >> 14)) & MASK32

    def random(self) -> float:
        """Float in [0, 1)."""
        return self.next_u32() / 4294967296.0

    __call__ = random


def prng(seed: SeedLike) -> Callable[[], float]:
    """Return a fresh generator function yielding floats in [0, 1)."""
    return Mulberry32(seed).random


def uniform(rand: Callable[[], float], low: float, high: float) -> float:
    """Float in [low, high) drawn from ``rand``."""
    return low + rand() * (high - low)
