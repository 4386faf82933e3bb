from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class CatConfig:
    flee_distance: float = 15.0
    follow_distance: float = 30.0
    flee_force: float = 0.00011
    align_force: float = 0.00007
    follow_force: float = 0.00017
    # Velocity decay per millisecond.
    damping: float = 0.9996
    initial_speed: float = 0.125
    stall_speed: float = 0.0001


@dataclass
class FieldConfig:
    attract_force: float = 0.0000006
    attract_radius: float = 0.0
    avoid_enabled: bool = False
    avoid_radius: float = 150.0
    avoid_force: float = 0.00018
    avoid_point: tuple[float, float] = (200.0, 200.0)


@dataclass
class SimulationConfig:
    arena_width: float = 1000.0
    arena_height: float = 1000.0
    density: float = 0.0003
    hard_update_interval: float = 100.0
    max_delta: float = 500.0
    frame_interval: float = 16.0
    warmup_steps: int = 100
    warmup_delta: float = 100.0
    toroidal_neighbors: bool = False
    seed: int = 42
    config_version: str = "v1"
    cat: CatConfig = field(default_factory=CatConfig)
    fields: FieldConfig = field(default_factory=FieldConfig)

    def __post_init__(self) -> None:
        if self.hard_update_interval <= 0:
            raise ValueError(f"hard_update_interval must be positive, got {self.hard_update_interval}")
        if self.max_delta <= 0:
            raise ValueError(f"max_delta must be positive, got {self.max_delta}")
        if self.density < 0:
            raise ValueError(f"density must be non-negative, got {self.density}")
        if self.cat.follow_distance <= 0:
            raise ValueError(f"cat.follow_distance must be positive, got {self.cat.follow_distance}")

    @property
    def cell_size(self) -> float:
        return self.cat.follow_distance

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 2
    snapshot_queue_limit: int = 64


def load_config(raw: dict) -> SimulationConfig:
    def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        return default

    cat = CatConfig(**raw.get("cat", {}))
    fields_raw = dict(raw.get("fields", {}))
    avoid_point = _pair(fields_raw.pop("avoid_point", None), FieldConfig().avoid_point)
    field_config = FieldConfig(avoid_point=avoid_point, **fields_raw)
    sim_values = {k: v for k, v in raw.items() if k not in {"cat", "fields"}}
    return SimulationConfig(cat=cat, fields=field_config, **sim_values)
