"""
Random Source - Injectable randomness for shuffles, probability checks and die rolls.

Nothing in the engine calls the global `random` module directly. Every
component receives a RandomSource so tests can substitute a seeded or
scripted source and replay a game exactly.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import random


class RandomSource(ABC):
    """Abstract source of uniform random values."""

    @abstractmethod
    def next_float(self) -> float:
        """Uniform float in [0, 1)."""
        pass

    @abstractmethod
    def next_int(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both ends inclusive."""
        pass

    def shuffle(self, items: list) -> None:
        """Unbiased in-place Fisher-Yates shuffle."""
        for i in range(len(items) - 1, 0, -1):
            j = self.next_int(0, i)
            items[i], items[j] = items[j], items[i]

    def choice(self, items):
        """Pick one element uniformly."""
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return items[self.next_int(0, len(items) - 1)]


class SeededRandom(RandomSource):
    """RandomSource backed by a private `random.Random` instance."""

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._random = random.Random(seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_int(self, low: int, high: int) -> int:
        return self._random.randint(low, high)
