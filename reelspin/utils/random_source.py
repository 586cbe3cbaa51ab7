"""
Random sources for reel draws.

A random source is any callable ``rng(maximum) -> int`` returning a uniformly
distributed integer in ``[1, maximum]``. The spin pipeline never creates its own
entropy beyond falling back to ``RandomSource()``.
"""

import random
import secrets
from typing import Iterable, Optional


class RandomSource:
    """Uniform integer draws backed by ``secrets.SystemRandom``, or a seeded PRNG."""

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._rng = random.Random(seed) if seed is not None else secrets.SystemRandom()

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def reseed(self, seed: Optional[int]):
        """Reseed (None -> system randomness)."""
        self._seed = seed
        self._rng = random.Random(seed) if seed is not None else secrets.SystemRandom()

    def __call__(self, maximum: int) -> int:
        if maximum < 1:
            raise ValueError(f"maximum must be >= 1, got {maximum}")
        return self._rng.randint(1, maximum)

    def __repr__(self):
        return f"<RandomSource seed={self._seed}>"


class ScriptedRandomSource:
    """
    Replays a fixed list of draws, in order.

    Used to reproduce a recorded spin exactly. Each draw is checked against the
    maximum it is requested for so a script that no longer fits the machine
    fails loudly instead of producing a different grid.
    """

    def __init__(self, draws: Iterable[int]):
        self._draws = list(draws)
        self._position = 0

    @property
    def remaining(self) -> int:
        return len(self._draws) - self._position

    def __call__(self, maximum: int) -> int:
        if self._position >= len(self._draws):
            raise IndexError(f"scripted random source exhausted after {len(self._draws)} draws")
        draw = self._draws[self._position]
        if not 1 <= draw <= maximum:
            raise ValueError(f"scripted draw {draw} at position {self._position} is outside [1, {maximum}]")
        self._position += 1
        return draw
