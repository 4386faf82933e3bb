from __future__ import annotations

import random

from pygame.math import Vector2


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_vector(self) -> Vector2:
        """Vector with both components uniform in [0, 1)."""
        return Vector2(self._random.random(), self._random.random())

    def next_symmetric_vector(self, magnitude: float) -> Vector2:
        """Vector with both components uniform in [-magnitude, magnitude)."""
        return Vector2(
            (self._random.random() * 2.0 - 1.0) * magnitude,
            (self._random.random() * 2.0 - 1.0) * magnitude,
        )
