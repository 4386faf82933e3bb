from __future__ import annotations

import math
import random

import pytest
from pygame.math import Vector2

from catflock.vector import (
    ceil_dimensions,
    clamp,
    floor_indices,
    in_bounds,
    is_finite,
    lerp,
    lerp_into,
    safe_normalize,
    unit_sign,
    wrap,
)


def test_lerp_is_exact_at_both_ends():
    rng = random.Random(11)
    for _ in range(200):
        a = Vector2(rng.uniform(-1e6, 1e6), rng.uniform(-1e-3, 1e-3))
        b = Vector2(rng.uniform(-1e-3, 1e-3), rng.uniform(-1e6, 1e6))
        start = lerp(a, b, 0.0)
        end = lerp(a, b, 1.0)
        assert (start.x, start.y) == (a.x, a.y)
        assert (end.x, end.y) == (b.x, b.y)


def test_lerp_into_writes_in_place_and_leaves_inputs_alone():
    a = Vector2(0.0, 10.0)
    b = Vector2(10.0, 0.0)
    out = Vector2()
    result = lerp_into(out, a, b, 0.25)
    assert result is out
    assert out == Vector2(2.5, 7.5)
    assert a == Vector2(0.0, 10.0)
    assert b == Vector2(10.0, 0.0)


def test_safe_normalize_handles_zero_and_returns_new_vector():
    assert safe_normalize(Vector2()) == Vector2()
    source = Vector2(3.0, 4.0)
    unit = safe_normalize(source)
    assert unit.x == pytest.approx(0.6)
    assert unit.y == pytest.approx(0.8)
    assert source == Vector2(3.0, 4.0)
    assert unit is not source


def test_is_finite_rejects_nan_and_inf():
    assert is_finite(Vector2(1.0, -2.0))
    assert not is_finite(Vector2(math.nan, 0.0))
    assert not is_finite(Vector2(0.0, math.inf))


@pytest.mark.parametrize("value, expected", [(3.5, 1.0), (-0.25, -1.0), (0.0, 0.0), (-0.0, 0.0)])
def test_unit_sign(value, expected):
    assert unit_sign(value) == expected


def test_cell_index_helpers():
    assert floor_indices(Vector2(59.9, 0.0), 30.0) == (1, 0)
    assert floor_indices(Vector2(-0.1, 30.0), 30.0) == (-1, 1)
    assert ceil_dimensions(1000.0, 600.0, 30.0) == (34, 20)
    assert ceil_dimensions(0.0, 0.0, 30.0) == (1, 1)


def test_wrap_clamp_and_bounds():
    assert wrap(-1, 5) == 4
    assert wrap(5, 5) == 0
    assert wrap(12, 5) == 2
    assert wrap(3, 5) == 3
    assert clamp(-4.0, 100.0) == 0.0
    assert clamp(100.0, 100.0) == 99.0
    assert clamp(42.0, 100.0) == 42.0
    assert clamp(3.0, 0.5) == 0.0
    assert in_bounds(0.0, 10.0)
    assert not in_bounds(10.0, 10.0)
    assert not in_bounds(-0.001, 10.0)
