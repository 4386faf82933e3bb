from __future__ import annotations

import math
from typing import Tuple

from pygame.math import Vector2

__all__ = [
    "safe_normalize",
    "lerp",
    "lerp_into",
    "is_finite",
    "unit_sign",
    "floor_indices",
    "ceil_dimensions",
    "wrap",
    "clamp",
    "in_bounds",
]


def safe_normalize(vector: Vector2) -> Vector2:
    """Unit vector in the direction of `vector`, or a zero vector when it has no direction."""
    x = vector.x
    y = vector.y
    magnitude_sq = x * x + y * y
    if magnitude_sq < 1e-18 or not math.isfinite(magnitude_sq):
        return Vector2()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector2(x * inv, y * inv)


def lerp(a: Vector2, b: Vector2, t: float) -> Vector2:
    # a*(1-t) + b*t is exact at both ends, unlike a + (b-a)*t.
    s = 1.0 - t
    return Vector2(a.x * s + b.x * t, a.y * s + b.y * t)


def lerp_into(out: Vector2, a: Vector2, b: Vector2, t: float) -> Vector2:
    s = 1.0 - t
    out.update(a.x * s + b.x * t, a.y * s + b.y * t)
    return out


def is_finite(vector: Vector2) -> bool:
    return math.isfinite(vector.x) and math.isfinite(vector.y)


def unit_sign(value: float) -> float:
    """value / abs(value), with 0 mapped to 0 instead of dividing by zero."""
    if value > 0.0:
        return 1.0
    if value < 0.0:
        return -1.0
    return 0.0


def floor_indices(position: Vector2, step: float) -> Tuple[int, int]:
    return (int(math.floor(position.x / step)), int(math.floor(position.y / step)))


def ceil_dimensions(width: float, height: float, step: float) -> Tuple[int, int]:
    return (max(1, int(math.ceil(width / step))), max(1, int(math.ceil(height / step))))


def wrap(value: int, bound: int) -> int:
    if 0 <= value < bound:
        return value
    return value % bound


def clamp(value: float, bound: float) -> float:
    if value < 0:
        return 0.0
    if value >= bound:
        return max(0.0, bound - 1)
    return value


def in_bounds(value: float, bound: float) -> bool:
    return 0 <= value < bound
