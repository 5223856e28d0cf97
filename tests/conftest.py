import sys
from pathlib import Path

# Ensure package import for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from tandem.config import SimConfig
from tandem.variates import VariateSource


class ScriptedVariates(VariateSource):
    """Hands out queued samples in order, then falls back to fixed values.

    Exhausted exponentials return the requested mean; exhausted uniforms
    return half the bound.
    """

    def __init__(self, exponentials=(), uniforms=()):
        super().__init__(seed=0)
        self.exponentials = list(exponentials)
        self.uniforms = list(uniforms)

    def exponential(self, mean):
        return self.exponentials.pop(0) if self.exponentials else mean

    def uniform(self, upper_bound):
        return self.uniforms.pop(0) if self.uniforms else upper_bound / 2.0


@pytest.fixture
def scripted():
    return ScriptedVariates


@pytest.fixture
def base_cfg() -> SimConfig:
    return SimConfig(
        mean_interarrival=1.0,
        mean_service=(0.5, 0.5),
        run_length=1000.0,
        seed=2024,
        replications=1,
    )


@pytest.fixture
def transit_cfg(base_cfg) -> SimConfig:
    return base_cfg.with_overrides(transit_bound=2.0)
