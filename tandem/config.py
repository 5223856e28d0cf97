# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Read-only run configuration built from the parsed YAML dict (see
#   experiments/baseline.yaml), plus a reader for the legacy four-number input
#   file (mean interarrival, mean service 1, mean service 2, run length).
#
# Design notes:
#   - All times are in MINUTES.
#   - transit.bound = null disables the transit link (plain tandem model).
#
# Usage:
#   cfg = SimConfig.from_dict(yaml.safe_load(open("experiments/baseline.yaml")))
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple
from .errors import InvalidConfiguration

DEFAULT_QUEUE_LIMIT = 100
DEFAULT_TRANSIT_BOUND = 2.0
DEFAULT_REPLICATIONS = 10

@dataclass(frozen=True)
class SimConfig:
    mean_interarrival: float
    mean_service: Tuple[float, float]        # stage 1, stage 2
    run_length: float
    queue_limit: int = DEFAULT_QUEUE_LIMIT
    transit_bound: Optional[float] = None    # None -> no transit link
    replications: int = DEFAULT_REPLICATIONS
    seed: Optional[int] = 0
    independent_streams: bool = False        # seed + rep per replication

    @property
    def has_transit(self) -> bool:
        return self.transit_bound is not None

    @classmethod
    def from_dict(cls, cfg: Dict) -> "SimConfig":
        """Build a config from the nested YAML layout and validate it.

        Expected sections: ``sim`` (mean_interarrival, run_length,
        queue_limit, seed), ``service_times`` (stage1, stage2), ``transit``
        (bound) and ``experiments`` (replications, independent_streams).
        """
        sim = cfg.get("sim") or {}
        svc = cfg.get("service_times") or {}
        transit = cfg.get("transit") or {}
        exp = cfg.get("experiments") or {}
        try:
            bound = transit.get("bound")
            out = cls(
                mean_interarrival=float(sim["mean_interarrival"]),
                mean_service=(float(svc["stage1"]), float(svc["stage2"])),
                run_length=float(sim["run_length"]),
                queue_limit=int(sim.get("queue_limit", DEFAULT_QUEUE_LIMIT)),
                transit_bound=float(bound) if bound is not None else None,
                replications=int(exp.get("replications", DEFAULT_REPLICATIONS)),
                seed=sim.get("seed", 0),
                independent_streams=bool(exp.get("independent_streams", False)),
            )
        except KeyError as exc:
            raise InvalidConfiguration(f"missing configuration key: {exc.args[0]}") from exc
        except (TypeError, ValueError) as exc:
            raise InvalidConfiguration(f"bad configuration value: {exc}") from exc
        out.validate()
        return out

    def validate(self):
        if self.mean_interarrival <= 0:
            raise InvalidConfiguration(f"mean interarrival time must be positive, got {self.mean_interarrival}")
        for i, m in enumerate(self.mean_service, start=1):
            if m <= 0:
                raise InvalidConfiguration(f"stage {i} mean service time must be positive, got {m}")
        # zero is allowed: the run ends before the first event
        if self.run_length < 0:
            raise InvalidConfiguration(f"run length must not be negative, got {self.run_length}")
        if self.queue_limit < 1:
            raise InvalidConfiguration(f"queue limit must be at least 1, got {self.queue_limit}")
        if self.transit_bound is not None and self.transit_bound < 0:
            raise InvalidConfiguration(f"transit bound must not be negative, got {self.transit_bound}")
        if self.replications < 1:
            raise InvalidConfiguration(f"replications must be at least 1, got {self.replications}")

    def with_overrides(self, **changes) -> "SimConfig":
        out = replace(self, **changes)
        out.validate()
        return out


def read_params_file(path: str) -> Dict:
    """
    Read the legacy whitespace-separated input file and return it as a
    config override dict (same nesting as the YAML file).
    """
    with open(path, "r") as f:
        fields = f.read().split()
    if len(fields) < 4:
        raise InvalidConfiguration(f"{path}: expected 4 numbers, found {len(fields)}")
    try:
        interarrival, svc1, svc2, run_length = (float(x) for x in fields[:4])
    except ValueError as exc:
        raise InvalidConfiguration(f"{path}: {exc}") from exc
    return {
        "sim": {"mean_interarrival": interarrival, "run_length": run_length},
        "service_times": {"stage1": svc1, "stage2": svc2},
    }
