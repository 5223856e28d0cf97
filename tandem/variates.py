# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# variates.py
# -----------------------------------------------------------------------------
# Purpose:
#   Random-variate source for the engine: exponential interarrival/service
#   times and uniform transit delays, drawn from one seeded stream.
#
# Design notes:
#   - Replications share one stream by default, so each replication continues
#     where the previous one stopped. spawn() hands out an independent stream
#     when a replication must be reproducible on its own.
#
# Usage:
#   rng = VariateSource(seed=0); rng.exponential(1.0); rng.uniform(2.0)
# -----------------------------------------------------------------------------

from __future__ import annotations
import random
from typing import Optional
from .errors import InvalidConfiguration

class VariateSource:
    """Exponential and uniform samples from a private `random.Random`."""
    def __init__(self, seed: Optional[int] = 0):
        self.seed = seed
        self._rng = random.Random(seed)

    def exponential(self, mean: float) -> float:
        if mean <= 0:
            raise InvalidConfiguration(f"exponential mean must be positive, got {mean}")
        return self._rng.expovariate(1.0 / mean)

    def uniform(self, upper_bound: float) -> float:
        if upper_bound < 0:
            raise InvalidConfiguration(f"uniform bound must be non-negative, got {upper_bound}")
        # random() lies in [0, 1), so the sample never reaches the bound
        return self._rng.random() * upper_bound

    def spawn(self, offset: int) -> "VariateSource":
        base = self.seed if self.seed is not None else 0
        return VariateSource(base + offset)
