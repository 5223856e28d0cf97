"""
experiments/scenarios.py

Holds scenario definitions to sweep during experiments. Each scenario is a
set of overrides merged on top of experiments/baseline.yaml.
"""

from __future__ import annotations

BASELINE = {
    "name": "baseline",
    "overrides": {},  # plain tandem line, no transit link
}

TRANSIT = {
    "name": "transit",
    "overrides": {
        # uniform(0, 2) minute walk between the two servers
        "transit": {"bound": 2.0},
        "sim": {"queue_limit": 150},
    },
}

HIGH_LOAD = {
    "name": "high_load",
    "overrides": {
        "service_times": {
            "stage1": 0.9,
            "stage2": 0.95,
        },
        "sim": {"queue_limit": 500},
    },
}

SCENARIOS = [BASELINE, TRANSIT, HIGH_LOAD]
