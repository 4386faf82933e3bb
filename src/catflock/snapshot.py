from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

from pygame.math import Vector2

from .metrics import HardUpdateMetrics
from .vector import safe_normalize


@dataclass(slots=True, frozen=True)
class CatSnapshot:
    x: float
    y: float
    vx: float
    vy: float

    def head(self, length: float = 10.0) -> Tuple[float, float]:
        """Tip of the direction stroke drawn from (x, y); points down when the cat is still."""
        if self.vx == 0 and self.vy == 0:
            return (self.x, self.y + length)
        direction = safe_normalize(Vector2(self.vx, self.vy))
        return (self.x + direction.x * length, self.y + direction.y * length)


@dataclass(slots=True)
class Snapshot:
    tick: int
    width: float
    height: float
    interpolation: float
    cats: List[CatSnapshot]
    metrics: Optional[HardUpdateMetrics] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "arena": {"width": self.width, "height": self.height},
            "interpolation": self.interpolation,
            "cats": [asdict(cat) for cat in self.cats],
            "metrics": None if self.metrics is None else asdict(self.metrics),
        }
