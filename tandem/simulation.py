# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Run the tandem model: build a fresh engine state per replication,
#   schedule the first arrival and the end of the run, drive the event loop,
#   and hand back one report per replication.
#
# Design notes:
#   - Every replication gets a brand-new EngineState; nothing but the
#     variate stream carries over between replications.
#   - Loop body: select next event -> accumulate areas -> trace -> dispatch.
#   - Errors (QueueOverflow, EventListExhausted) propagate and stop the
#     remaining replications.
#
# Usage:
#   from tandem.simulation import run_replications
#   reports = run_replications(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import enum
import logging
from typing import Callable, List, Optional
from .config import SimConfig
from .metrics import ReplicationReport, accumulate, summarize
from .network import Router, TransitLink
from .queues import EventKind, FutureEventList, SimulationClock
from .stations import make_stages
from .trace import trace_event
from .variates import VariateSource

logger = logging.getLogger(__name__)

class EngineState:
    """All mutable state of one replication.

    Attributes
    ----------
    clock : SimulationClock
    events : FutureEventList
    stage1, stage2 : Stage
    transit : TransitLink or None
    router : Router
    customers_delayed_total : int
        Service starts at both stages.
    variates : VariateSource
        Shared with the caller; not part of the replication's own state.
    """
    def __init__(self, cfg: SimConfig, variates: VariateSource):
        self.cfg = cfg
        self.variates = variates
        self.clock = SimulationClock()
        self.events = FutureEventList(self.clock)
        self.stage1, self.stage2 = make_stages(cfg)
        self.transit: Optional[TransitLink] = TransitLink(cfg.transit_bound) if cfg.has_transit else None
        self.router = Router(self.stage1, self.stage2, self.transit)
        self.customers_delayed_total = 0


class Engine:
    """Event loop over one EngineState.

    Parameters
    ----------
    cfg : SimConfig
        Validated run configuration.
    variates : VariateSource
        Sample source; keep passing the same one to continue its stream.
    """
    def __init__(self, cfg: SimConfig, variates: VariateSource):
        self.cfg = cfg
        self.variates = variates
        self.state: Optional[EngineState] = None
        self.finished = False
        self.events_processed = 0
        self._first_arrival: Optional[float] = None

    def initialize(self):
        """Start a replication from an empty, idle system at time zero.

        The first interarrival time is drawn once per engine; re-initializing
        before any event runs reuses it, so initialize(); initialize() leaves
        the same state as a single call.
        """
        if self._first_arrival is None or self.events_processed > 0:
            self._first_arrival = self.variates.exponential(self.cfg.mean_interarrival)
        env = EngineState(self.cfg, self.variates)
        env.events.schedule(EventKind.ARRIVE_STAGE1, self._first_arrival)
        env.events.schedule(EventKind.END_SIMULATION, self.cfg.run_length)
        self.state = env
        self.finished = False
        self.events_processed = 0
        return env

    def step(self) -> EventKind:
        """Process the next event and return its kind."""
        env = self.state
        if env is None:
            raise RuntimeError("Engine.step() before initialize()")
        if self.finished:
            raise RuntimeError("replication already finished; call initialize()")
        kind = env.events.select_next()
        accumulate(env, env.clock.elapsed())
        trace_event(env, kind)
        self._dispatch(env, kind)
        self.events_processed += 1
        return kind

    def _dispatch(self, env: EngineState, kind: EventKind):
        if kind is EventKind.ARRIVE_STAGE1:
            # exogenous Poisson arrivals: book the next one first
            env.events.schedule(EventKind.ARRIVE_STAGE1,
                                env.clock.current_time + self.variates.exponential(self.cfg.mean_interarrival))
            env.stage1.on_arrival(env)
        elif kind is EventKind.COMPLETE_STAGE1:
            env.stage1.on_completion(env)
        elif kind is EventKind.ARRIVE_STAGE2:
            env.router.on_transit_arrival(env)
        elif kind is EventKind.COMPLETE_STAGE2:
            env.stage2.on_completion(env)
        elif kind is EventKind.END_SIMULATION:
            self.finished = True

    def run(self, replication: int = 1) -> ReplicationReport:
        """Run events until END_SIMULATION and return the replication report."""
        while not self.finished:
            self.step()
        return summarize(self.state, replication)

    def snapshot(self) -> dict:
        """Plain-data view of the current state, for tests and diagnostics."""
        env = self.state
        return {
            "current_time": env.clock.current_time,
            "time_of_last_event": env.clock.time_of_last_event,
            "events": env.events.pending(),
            "stage1": env.stage1.snapshot(),
            "stage2": env.stage2.snapshot(),
            "transit": env.transit.snapshot() if env.transit is not None else None,
            "customers_delayed_total": env.customers_delayed_total,
        }


class DriverState(enum.Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    RUNNING = "running"
    REPORTING = "reporting"


class ReplicationDriver:
    """Run cfg.replications independent replications back to back.

    Parameters
    ----------
    cfg : SimConfig
    variates : VariateSource, optional
        Shared stream; defaults to VariateSource(cfg.seed).
    on_report : callable, optional
        Called with each ReplicationReport as soon as it is produced.
    """
    def __init__(self, cfg: SimConfig, variates: Optional[VariateSource] = None,
                 on_report: Optional[Callable[[ReplicationReport], None]] = None):
        cfg.validate()
        self.cfg = cfg
        self.variates = variates if variates is not None else VariateSource(cfg.seed)
        self.on_report = on_report
        self.state = DriverState.IDLE
        self.reports: List[ReplicationReport] = []

    def _source_for(self, rep: int) -> VariateSource:
        if self.cfg.independent_streams:
            return self.variates.spawn(rep)
        return self.variates

    def run_one(self, rep: int) -> ReplicationReport:
        self.state = DriverState.INITIALIZING
        engine = Engine(self.cfg, self._source_for(rep))
        engine.initialize()
        self.state = DriverState.RUNNING
        while not engine.finished:
            engine.step()
        self.state = DriverState.REPORTING
        report = summarize(engine.state, rep + 1)
        logger.info("replication %d/%d done: %d events, mean delay %.3f",
                    rep + 1, self.cfg.replications, engine.events_processed, report.mean_delay)
        self.reports.append(report)
        if self.on_report is not None:
            self.on_report(report)
        self.state = DriverState.IDLE
        return report

    def run(self) -> List[ReplicationReport]:
        self.reports = []
        for rep in range(self.cfg.replications):
            self.run_one(rep)
        return self.reports


def run_replications(cfg: SimConfig, on_report: Optional[Callable[[ReplicationReport], None]] = None) -> List[ReplicationReport]:
    return ReplicationDriver(cfg, on_report=on_report).run()
