"""Seeded random number generator backing the dice roller.

Wraps Python's random.Random so a whole card resolution can be replayed
from a seed.
"""

from __future__ import annotations

import random


class GameRNG:
    """Deterministic RNG for dice rolls.

    Parameters
    ----------
    seed:
        Integer seed for the underlying Mersenne Twister.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def random_int(self, low: int, high: int) -> int:
        """Return a random integer *N* such that ``low <= N <= high``."""
        return self._rng.randint(low, high)

    def __repr__(self) -> str:
        return f"GameRNG(seed={self._seed})"
