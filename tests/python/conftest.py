import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from catflock.config import FieldConfig, SimulationConfig  # noqa: E402


@pytest.fixture
def quiet_config() -> SimulationConfig:
    """200x200 arena with the point attraction switched off."""
    return SimulationConfig(
        arena_width=200.0,
        arena_height=200.0,
        seed=3,
        fields=FieldConfig(attract_force=0.0),
    )
