import sys
from pathlib import Path

# Ensure package and main.py import for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from linksim.config import SimulationConfig, SourceConfig


@pytest.fixture
def two_source_config() -> SimulationConfig:
    """Two moderately loaded sources sharing a 200 KB/s link."""
    return SimulationConfig(
        simulation_time=20.0,
        link_capacity=200_000.0,
        buffer_size=5,
        sources=[
            SourceConfig(rate=60.0, min_size=500, max_size=1500, weight=1.0, end_time=20.0),
            SourceConfig(rate=80.0, min_size=500, max_size=1500, weight=2.0, end_time=20.0),
        ],
    )


@pytest.fixture
def overloaded_config() -> SimulationConfig:
    """Three sources offering several times the link capacity."""
    return SimulationConfig(
        simulation_time=10.0,
        link_capacity=100_000.0,
        buffer_size=8,
        sources=[
            SourceConfig(rate=150.0, min_size=200, max_size=1800, weight=1.0, end_time=10.0),
            SourceConfig(rate=100.0, min_size=1000, max_size=1000, weight=3.0, end_time=10.0),
            SourceConfig(rate=250.0, min_size=64, max_size=1500, weight=0.5, start_time=2.0, end_time=8.0),
        ],
    )
