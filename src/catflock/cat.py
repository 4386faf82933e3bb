from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from pygame.math import Vector2

from .config import CatConfig
from .rng import DeterministicRng
from .vector import is_finite, lerp_into, safe_normalize


@dataclass(slots=True)
class Neighbor:
    cat: "Cat"
    # cat.position minus the querying cat's position, computed at query time.
    relative_position: Vector2


@dataclass(slots=True, eq=False)
class Cat:
    position: Vector2
    flee_distance: float = 15.0
    follow_distance: float = 30.0
    flee_force: float = 0.00011
    align_force: float = 0.00007
    follow_force: float = 0.00017
    damping: float = 0.9996
    velocity: Vector2 = field(default_factory=Vector2)
    direction: Vector2 = field(default_factory=Vector2)
    previous_position: Vector2 = field(init=False)
    previous_velocity: Vector2 = field(default_factory=Vector2)
    interpolated_position: Vector2 = field(init=False)
    interpolated_velocity: Vector2 = field(default_factory=Vector2)

    def __post_init__(self) -> None:
        self.previous_position = Vector2(self.position)
        self.interpolated_position = Vector2(self.position)

    @classmethod
    def from_config(cls, position: Vector2, config: CatConfig) -> "Cat":
        return cls(
            position=position,
            flee_distance=config.flee_distance,
            follow_distance=config.follow_distance,
            flee_force=config.flee_force,
            align_force=config.align_force,
            follow_force=config.follow_force,
            damping=config.damping,
        )

    @classmethod
    def random(cls, rng: DeterministicRng, width: float, height: float, config: CatConfig) -> "Cat":
        position = Vector2(rng.next_range(0.0, width), rng.next_range(0.0, height))
        cat = cls.from_config(position, config)
        cat.velocity = rng.next_symmetric_vector(config.initial_speed)
        return cat

    def accelerate(self, acceleration: Vector2) -> bool:
        """Add `acceleration` to the velocity unless it is NaN or infinite."""
        if not is_finite(acceleration):
            return False
        self.velocity += acceleration
        return True

    def flee(self, neighbor: Neighbor, delta: float) -> None:
        away = safe_normalize(-neighbor.relative_position)
        self.accelerate(away * (self.flee_force * delta))

    def align(self, direction: Vector2, delta: float) -> None:
        self.accelerate(direction * (self.align_force * delta))

    def follow(self, offset: Vector2, delta: float) -> None:
        self.accelerate(safe_normalize(offset) * (self.follow_force * delta))

    def prepare(self) -> None:
        self.direction = safe_normalize(self.velocity)

    def update(self, neighbors: Iterable[Neighbor], delta: float) -> None:
        """Accumulate flee, align and follow forces from `neighbors` into the velocity.

        Reads only the neighbours' cached ``direction``, so every cat must have
        run ``prepare()`` for this step first.
        """
        self.previous_velocity.update(self.velocity)
        follow_sq = self.follow_distance * self.follow_distance
        flee_sq = self.flee_distance * self.flee_distance
        heading_sum = Vector2()
        offset_sum = Vector2()
        followed = 0
        for neighbor in neighbors:
            if neighbor.cat is self:
                continue
            offset = neighbor.relative_position
            dist_sq = offset.x * offset.x + offset.y * offset.y
            if dist_sq >= follow_sq:
                continue
            heading_sum += neighbor.cat.direction
            offset_sum += offset
            followed += 1
            if dist_sq < flee_sq:
                self.flee(neighbor, delta)

        self.velocity *= self.damping**delta
        if followed:
            self.follow(offset_sum / followed, delta)
        self.align(safe_normalize(heading_sum), delta)

    def forward(self, delta: float) -> None:
        self.previous_position.update(self.position)
        self.position += self.velocity * delta

    def interpolate(self, t: float) -> None:
        lerp_into(self.interpolated_position, self.previous_position, self.position, t)
        lerp_into(self.interpolated_velocity, self.previous_velocity, self.velocity, t)
