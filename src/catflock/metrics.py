from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class HardUpdateMetrics:
    tick: int
    population: int
    neighbor_checks: int
    average_speed: float
    delta: float
    tick_duration_ms: float = 0.0
