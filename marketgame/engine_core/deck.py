"""
Shuffled Deck - Generic card container for stocks, events and action cards.

The top of the deck is the end of the list: `deal()` pops from the end
and `peek()` looks at the same element.
"""

from __future__ import annotations
from typing import Generic, Iterable, TypeVar

from .random_source import RandomSource, SeededRandom

T = TypeVar("T")


class ShuffledDeck(Generic[T]):
    """A list of items with Fisher-Yates shuffle and deal-from-top."""

    def __init__(
        self,
        items: Iterable[T] | None = None,
        rng: RandomSource | None = None,
        shuffle: bool = True,
    ):
        self._cards: list[T] = list(items or [])
        self.rng = rng or SeededRandom()
        if shuffle:
            self.shuffle()

    @property
    def cards(self) -> list[T]:
        """Remaining cards, bottom first."""
        return self._cards

    @property
    def is_empty(self) -> bool:
        return len(self._cards) == 0

    def __len__(self) -> int:
        return len(self._cards)

    def shuffle(self) -> None:
        """Shuffle the remaining cards in place."""
        self.rng.shuffle(self._cards)

    def deal(self) -> T | None:
        """Remove and return the top card, or None if the deck is empty."""
        if not self._cards:
            return None
        return self._cards.pop()

    def peek(self) -> T | None:
        """Return the top card without removing it, or None if empty."""
        if not self._cards:
            return None
        return self._cards[-1]
