from __future__ import annotations

import math

import pytest
from pygame.math import Vector2

from catflock.cat import Cat, Neighbor
from catflock.config import CatConfig
from catflock.rng import DeterministicRng


def _make_cat(x: float, y: float, vx: float = 0.0, vy: float = 0.0, config: CatConfig | None = None) -> Cat:
    cat = Cat.from_config(Vector2(x, y), config or CatConfig())
    cat.velocity = Vector2(vx, vy)
    return cat


def _neighbor(cat: Cat, of: Cat) -> Neighbor:
    return Neighbor(cat, cat.position - of.position)


def test_cat_uses_slots_and_owns_its_vectors():
    cat = _make_cat(10.0, 20.0)
    other = _make_cat(10.0, 20.0)
    assert not hasattr(cat, "__dict__")
    assert cat.previous_position is not cat.position
    assert cat.interpolated_position == cat.position
    cat.previous_velocity.x = 4.0
    assert other.previous_velocity.x == 0.0


def test_random_cat_stays_in_arena_with_small_velocity():
    rng = DeterministicRng(1)
    config = CatConfig()
    for _ in range(50):
        cat = Cat.random(rng, 300.0, 200.0, config)
        assert 0.0 <= cat.position.x <= 300.0
        assert 0.0 <= cat.position.y <= 200.0
        assert abs(cat.velocity.x) <= config.initial_speed
        assert abs(cat.velocity.y) <= config.initial_speed


def test_prepare_caches_unit_direction():
    cat = _make_cat(0.0, 0.0, 3.0, 4.0)
    cat.prepare()
    assert cat.direction.x == pytest.approx(0.6)
    assert cat.direction.y == pytest.approx(0.8)

    still = _make_cat(0.0, 0.0)
    still.prepare()
    assert still.direction == Vector2()


def test_lone_cat_only_damps():
    cat = _make_cat(0.0, 0.0, 1.0, -0.5)
    cat.prepare()
    cat.update([Neighbor(cat, Vector2())], 100.0)
    decay = 0.9996**100
    assert cat.velocity.x == pytest.approx(decay)
    assert cat.velocity.y == pytest.approx(-0.5 * decay)
    assert cat.previous_velocity == Vector2(1.0, -0.5)


def test_flee_pushes_away_from_close_neighbor():
    config = CatConfig(align_force=0.0, follow_force=0.0)
    cat = _make_cat(0.0, 0.0, config=config)
    other = _make_cat(5.0, 0.0, config=config)
    for c in (cat, other):
        c.prepare()
    cat.update([_neighbor(other, cat)], 10.0)
    assert cat.velocity.x == pytest.approx(-config.flee_force * 10.0 * 0.9996**10)
    assert cat.velocity.y == 0.0


def test_follow_pulls_towards_average_offset_outside_flee_range():
    config = CatConfig(align_force=0.0)
    cat = _make_cat(0.0, 0.0, config=config)
    above = _make_cat(0.0, 20.0, config=config)
    right = _make_cat(20.0, 0.0, config=config)
    far = _make_cat(-200.0, 0.0, config=config)
    for c in (cat, above, right, far):
        c.prepare()
    cat.update([_neighbor(n, cat) for n in (above, right, far)], 10.0)
    expected = config.follow_force * 10.0 / math.sqrt(2.0)
    assert cat.velocity.x == pytest.approx(expected)
    assert cat.velocity.y == pytest.approx(expected)


def test_align_reads_neighbor_direction_without_mutating_it():
    config = CatConfig(follow_force=0.0)
    cat = _make_cat(0.0, 0.0, config=config)
    other = _make_cat(20.0, 0.0, 0.0, 2.0, config=config)
    for c in (cat, other):
        c.prepare()
    cat.update([_neighbor(other, cat)], 10.0)
    assert cat.velocity.x == pytest.approx(0.0)
    assert cat.velocity.y == pytest.approx(config.align_force * 10.0)
    assert other.direction == Vector2(0.0, 1.0)
    assert other.velocity == Vector2(0.0, 2.0)


def test_coincident_cats_do_not_produce_nan():
    cat = _make_cat(50.0, 50.0)
    twin = _make_cat(50.0, 50.0)
    for c in (cat, twin):
        c.prepare()
    cat.update([_neighbor(twin, cat), Neighbor(cat, Vector2())], 100.0)
    assert math.isfinite(cat.velocity.x)
    assert math.isfinite(cat.velocity.y)
    assert cat.velocity == Vector2()


def test_accelerate_rejects_non_finite_values():
    cat = _make_cat(0.0, 0.0, 1.0, 1.0)
    assert not cat.accelerate(Vector2(math.nan, 0.0))
    assert not cat.accelerate(Vector2(0.0, math.inf))
    assert cat.velocity == Vector2(1.0, 1.0)
    assert cat.accelerate(Vector2(0.5, 0.0))
    assert cat.velocity == Vector2(1.5, 1.0)


def test_forward_records_previous_position():
    cat = _make_cat(10.0, 10.0, 0.1, -0.2)
    cat.forward(100.0)
    assert cat.previous_position == Vector2(10.0, 10.0)
    assert cat.position.x == pytest.approx(20.0)
    assert cat.position.y == pytest.approx(-10.0)


def test_interpolate_between_previous_and_current_state():
    cat = _make_cat(0.0, 0.0, 1.0, 0.0)
    cat.prepare()
    cat.update([], 0.0)
    cat.velocity = Vector2(3.0, 0.0)
    cat.forward(10.0)

    cat.interpolate(0.0)
    assert cat.interpolated_position == cat.previous_position
    assert cat.interpolated_velocity == Vector2(1.0, 0.0)

    cat.interpolate(0.5)
    assert cat.interpolated_position == Vector2(15.0, 0.0)
    assert cat.interpolated_velocity == Vector2(2.0, 0.0)

    cat.interpolate(1.0)
    assert cat.interpolated_position == cat.position
    assert cat.interpolated_velocity == cat.velocity
