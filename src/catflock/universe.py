from __future__ import annotations

import logging
import math
from time import perf_counter
from typing import List, Optional, Tuple

from pygame.math import Vector2

from .cat import Cat, Neighbor
from .config import SimulationConfig
from .metrics import HardUpdateMetrics
from .neighbor_grid import NeighborGrid
from .rng import DeterministicRng
from .snapshot import CatSnapshot, Snapshot
from .vector import clamp, in_bounds, unit_sign

logger = logging.getLogger(__name__)


def _check_point(x: float, y: float) -> Vector2:
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"point must be finite, got ({x}, {y})")
    return Vector2(x, y)


class Universe:
    """Owns the flock and runs the fixed-step physics behind a per-frame interpolation.

    ``update(delta)`` is called once per rendered frame. Frames accumulate into
    ``hard_update_delay``; while it is below ``hard_update_interval`` a frame only
    interpolates (soft update), and once it reaches the interval the next frame
    resizes the population and runs one hard update with the whole accumulated
    delay as its timestep.
    """

    def __init__(self, config: SimulationConfig | None = None):
        self._config = config if config is not None else SimulationConfig()
        self._rng = DeterministicRng(self._config.seed)
        self._width = 0.0
        self._height = 0.0
        self.resize(self._config.arena_width, self._config.arena_height)
        self._cats: List[Cat] = []
        self._focus_point: Vector2 | None = None
        fields = self._config.fields
        self._avoid_point = _check_point(*fields.avoid_point)
        self._avoid_enabled = fields.avoid_enabled
        self._hard_update_delay = 0.0
        self._tick = 0
        self._metrics: HardUpdateMetrics | None = None

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def cats(self) -> List[Cat]:
        return self._cats

    @property
    def size(self) -> Tuple[float, float]:
        return (self._width, self._height)

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def hard_update_delay(self) -> float:
        return self._hard_update_delay

    @property
    def metrics(self) -> HardUpdateMetrics | None:
        return self._metrics

    @property
    def focus_point(self) -> Vector2:
        if self._focus_point is not None:
            return Vector2(self._focus_point)
        return Vector2(self._width * 0.5, self._height * 0.5)

    @property
    def avoid_point(self) -> Vector2:
        return Vector2(self._avoid_point)

    @property
    def avoid_enabled(self) -> bool:
        return self._avoid_enabled

    def resize(self, width: float, height: float) -> None:
        if not (math.isfinite(width) and math.isfinite(height)) or width < 0 or height < 0:
            raise ValueError(f"arena size must be finite and non-negative, got {width}x{height}")
        self._width = float(width)
        self._height = float(height)

    def set_pointer(self, x: float, y: float) -> None:
        self._avoid_point = _check_point(x, y)

    def set_focus_point(self, point: Optional[Tuple[float, float]]) -> None:
        """Pull the flock towards `point`; ``None`` goes back to the arena centre."""
        self._focus_point = None if point is None else _check_point(point[0], point[1])

    def set_avoid_enabled(self, enabled: bool) -> None:
        self._avoid_enabled = bool(enabled)

    def reset(self) -> None:
        self._cats.clear()
        self._rng.reset()
        self._hard_update_delay = 0.0
        self._tick = 0
        self._metrics = None

    def healthy_number_of_cats(self) -> int:
        return int(math.floor(self._width * self._height * self._config.density))

    def update_population(self) -> None:
        wanted = self.healthy_number_of_cats()
        current = len(self._cats)
        if current < wanted:
            for _ in range(wanted - current):
                self._cats.append(Cat.random(self._rng, self._width, self._height, self._config.cat))
        elif current > wanted:
            # Newest cats go first.
            del self._cats[wanted:]
        else:
            return
        logger.debug("population %d -> %d for %.0fx%.0f arena", current, wanted, self._width, self._height)

    def neighbors_of(self, grid: NeighborGrid, cat: Cat) -> List[Neighbor]:
        origin = cat.position
        neighbors = [Neighbor(other, other.position - origin) for other in grid.get_neighbors(cat)]
        if grid.wrap_edges:
            for neighbor in neighbors:
                self._nearest_image(neighbor.relative_position)
        return neighbors

    def _nearest_image(self, offset: Vector2) -> None:
        half_w = self._width * 0.5
        half_h = self._height * 0.5
        if offset.x > half_w:
            offset.x -= self._width
        elif offset.x < -half_w:
            offset.x += self._width
        if offset.y > half_h:
            offset.y -= self._height
        elif offset.y < -half_h:
            offset.y += self._height

    def put_into_bounds(self, cat: Cat) -> None:
        position = cat.position
        velocity = cat.velocity
        if not in_bounds(position.x, self._width):
            velocity.x = -velocity.x
            position.x = clamp(position.x, self._width)
        if not in_bounds(position.y, self._height):
            velocity.y = -velocity.y
            position.y = clamp(position.y, self._height)

    def apply_avoid(self, cat: Cat, delta: float) -> None:
        fields = self._config.fields
        away = cat.position - self._avoid_point
        if away.length_squared() < fields.avoid_radius * fields.avoid_radius:
            push = Vector2(unit_sign(away.x), unit_sign(away.y))
            cat.accelerate(push * (fields.avoid_force * delta))

    def apply_attract(self, cat: Cat, delta: float) -> None:
        fields = self._config.fields
        toward = self.focus_point - cat.position
        if toward.length_squared() > fields.attract_radius * fields.attract_radius:
            cat.accelerate(toward * (fields.attract_force * delta))

    def hard_update(self, delta: float) -> HardUpdateMetrics:
        start = perf_counter()
        config = self._config
        cats = self._cats
        grid = NeighborGrid(self._width, self._height, config.cell_size, wrap_edges=config.toroidal_neighbors)
        for cat in cats:
            if cat.velocity.x == 0 and cat.velocity.y == 0:
                cat.velocity = self._rng.next_vector() * config.cat.stall_speed
            self.put_into_bounds(cat)
            cat.prepare()
            grid.add(cat)
        grid.create_groups()

        # Every force is computed from pre-integration state before anyone moves.
        neighbor_checks = 0
        avoid = self._avoid_enabled
        for cat in cats:
            neighbors = self.neighbors_of(grid, cat)
            neighbor_checks += len(neighbors)
            cat.update(neighbors, delta)
            if avoid:
                self.apply_avoid(cat, delta)
            self.apply_attract(cat, delta)

        speed_sum = 0.0
        for cat in cats:
            cat.forward(delta)
            self.put_into_bounds(cat)
            speed_sum += cat.velocity.length()

        self._tick += 1
        population = len(cats)
        metrics = HardUpdateMetrics(
            tick=self._tick,
            population=population,
            neighbor_checks=neighbor_checks,
            average_speed=0.0 if population == 0 else speed_sum / population,
            delta=delta,
            tick_duration_ms=(perf_counter() - start) * 1000.0,
        )
        self._metrics = metrics
        return metrics

    def soft_update(self) -> None:
        t = self._hard_update_delay / self._config.hard_update_interval
        for cat in self._cats:
            cat.interpolate(t)

    def update(self, delta: float) -> HardUpdateMetrics | None:
        """Advance by one rendered frame of `delta` ms; returns metrics when a hard update ran."""
        interval = self._config.hard_update_interval
        if self._hard_update_delay < interval:
            self.soft_update()
            self._hard_update_delay += delta
            return None
        self.update_population()
        metrics = self.hard_update(self._hard_update_delay)
        self._hard_update_delay %= interval
        return metrics

    def warm_up(self, steps: int | None = None, delta: float | None = None) -> None:
        steps = self._config.warmup_steps if steps is None else steps
        delta = self._config.warmup_delta if delta is None else delta
        self.update_population()
        for _ in range(steps):
            self.hard_update(delta)
        logger.debug("warmed up %d cats with %d hard updates of %.1f ms", len(self._cats), steps, delta)

    def snapshot(self) -> Snapshot:
        cats = [
            CatSnapshot(
                x=cat.interpolated_position.x,
                y=cat.interpolated_position.y,
                vx=cat.interpolated_velocity.x,
                vy=cat.interpolated_velocity.y,
            )
            for cat in self._cats
        ]
        return Snapshot(
            tick=self._tick,
            width=self._width,
            height=self._height,
            interpolation=min(1.0, self._hard_update_delay / self._config.hard_update_interval),
            cats=cats,
            metrics=self._metrics,
        )
