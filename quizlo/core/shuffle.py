"""
Fisher-Yates shuffling with an injectable random source.

Every randomized decision in the engine goes through a Shuffler so tests
can substitute a seeded or fully deterministic one.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


class Shuffler:
    """Produces permutations and samples from a private Random instance."""

    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self.rng = rng or random.Random(seed)

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Return a shuffled copy of items (Fisher-Yates, the input is untouched)."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.rng.randint(0, i)
            result[i], result[j] = result[j], result[i]
        return result

    def sample(self, items: Sequence[T], k: int) -> list[T]:
        """Uniformly draw k items without replacement."""
        k = max(0, min(k, len(items)))
        return self.shuffle(items)[:k]

    def permutation(self, size: int) -> tuple[int, ...]:
        return tuple(self.shuffle(range(size)))
