# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Time-weighted statistics for one replication and the text report built
#   from them: mean delays, mean queue lengths, transit occupancy, server
#   utilizations.
#
# Design notes:
#   - accumulate() runs before every event handler with the time since the
#     previous event; state is piecewise constant between events, so the
#     rectangle rule gives the exact integral.
#   - Ratios over an empty run (zero time or zero customers) report 0.0.
#   - as_dict() returns JSON-serializable values for tabulation across
#     replications.
#
# Usage:
#   accumulate(env, dt); report = summarize(env, replication=1)
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple
from .config import SimConfig

def accumulate(env, dt: float):
    """Add the area under every state variable over the last `dt` minutes."""
    env.stage1.accumulate(dt)
    env.stage2.accumulate(dt)
    if env.transit is not None:
        env.transit.accumulate(dt)

def _ratio(num: float, den: float) -> float:
    return num / den if den > 0 else 0.0

@dataclass(frozen=True)
class ReplicationReport:
    replication: int
    mean_delay: float                       # all delays / all service starts
    stage_mean_delay: Tuple[float, float]
    stage_mean_queue: Tuple[float, float]
    mean_in_flight: Optional[float]         # None without a transit link
    max_in_flight: Optional[int]
    utilization: Tuple[float, float]
    end_time: float
    customers_delayed: int
    customers_served: Tuple[int, int]

    def as_dict(self) -> Dict:
        return asdict(self)


def summarize(env, replication: int) -> ReplicationReport:
    s1, s2 = env.stage1, env.stage2
    now = env.clock.current_time
    transit = env.transit
    return ReplicationReport(
        replication=replication,
        mean_delay=_ratio(s1.total_delay + s2.total_delay, env.customers_delayed_total),
        stage_mean_delay=(s1.mean_delay(), s2.mean_delay()),
        stage_mean_queue=(_ratio(s1.area_queue_length, now), _ratio(s2.area_queue_length, now)),
        mean_in_flight=_ratio(transit.area_in_flight, now) if transit is not None else None,
        max_in_flight=transit.max_in_flight_seen if transit is not None else None,
        utilization=(_ratio(s1.area_server_busy, now), _ratio(s2.area_server_busy, now)),
        end_time=now,
        customers_delayed=env.customers_delayed_total,
        customers_served=(s1.customers_served, s2.customers_served),
    )


def format_header(cfg: SimConfig) -> str:
    """Parameter heading written once before the first replication."""
    lines = [
        "Tandem-server queueing system",
        "",
        f"Mean interarrival time{cfg.mean_interarrival:16.3f} minutes",
        f"SRVR1 mean service time{cfg.mean_service[0]:15.3f} minutes",
        f"SRVR2 mean service time{cfg.mean_service[1]:15.3f} minutes",
    ]
    if cfg.has_transit:
        lines.append(f"Transit time uniform on [0,{cfg.transit_bound:.3f}) minutes")
    lines.append(f"Length of the simulation{cfg.run_length:14.3f} minutes")
    lines.append(f"Queue limit{cfg.queue_limit:27d}")
    return "\n".join(lines) + "\n"


def format_report(report: ReplicationReport) -> str:
    """Human-readable block for one replication; field order is fixed."""
    r = report
    lines: List[str] = [
        f"Replication {r.replication}",
        f"Average delay in system:  {r.mean_delay:10.3f} minutes",
        f"Average delay in queue 1: {r.stage_mean_delay[0]:10.3f} minutes",
        f"Average delay in queue 2: {r.stage_mean_delay[1]:10.3f} minutes",
        f"Average number in queue 1:{r.stage_mean_queue[0]:10.3f} customers",
        f"Average number in queue 2:{r.stage_mean_queue[1]:10.3f} customers",
    ]
    if r.mean_in_flight is not None:
        lines.append(f"Average number in transit:{r.mean_in_flight:10.3f} customers")
        lines.append(f"Maximum number in transit:{r.max_in_flight:10d} customers")
    lines += [
        f"SERVER ONE utilization:   {r.utilization[0]:10.3f}",
        f"SERVER TWO utilization:   {r.utilization[1]:10.3f}",
        f"Simulation end time:      {r.end_time:10.3f} minutes",
    ]
    return "\n".join(lines) + "\n"
