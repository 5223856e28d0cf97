# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   The two service stages of the tandem line. A Stage bundles one server,
#   the FIFO waiting line in front of it, and the per-stage counters and
#   time-weighted areas used by the report.
#
# Design notes:
#   - Handlers receive the engine state (`env`) explicitly; a stage only
#     touches its own server/line and its own completion slot in env.events.
#   - Where a finished customer goes next is delegated to env.router
#     (defined in tandem.network).
#
# Usage:
#   from tandem.stations import make_stages
# -----------------------------------------------------------------------------

from __future__ import annotations
import enum
import logging
from typing import Tuple
from .config import SimConfig
from .queues import EventKind, WaitingLine

logger = logging.getLogger(__name__)

class ServerStatus(enum.IntEnum):
    IDLE = 0
    BUSY = 1


class Server:
    """Single server: busy/idle flag plus its mean service time (minutes)."""
    __slots__ = ("status", "mean_service_time")
    def __init__(self, mean_service_time: float):
        self.status = ServerStatus.IDLE
        self.mean_service_time = mean_service_time

    @property
    def busy(self) -> bool:
        return self.status is ServerStatus.BUSY


class Stage:
    """One queue + server pair.

    Parameters
    ----------
    name : str
        Stage name for diagnostics ("stage1", "stage2").
    mean_service_time : float
        Mean of the exponential service time.
    queue_limit : int
        Capacity of the waiting line.
    completion_kind : EventKind
        Event slot this stage uses for its service completions.

    Counters
    --------
    customers_arrived : customers that reached this stage.
    customers_delayed : customers that started service (delay denominator).
    customers_served  : customers that finished service.
    """
    def __init__(self, name: str, mean_service_time: float, queue_limit: int, completion_kind: EventKind):
        self.name = name
        self.completion_kind = completion_kind
        self.server = Server(mean_service_time)
        self.line = WaitingLine(name, queue_limit)
        self.customers_arrived = 0
        self.customers_delayed = 0
        self.customers_served = 0
        self.total_delay = 0.0
        self.area_queue_length = 0.0
        self.area_server_busy = 0.0

    @property
    def queue_length(self) -> int:
        return len(self.line)

    def on_arrival(self, env):
        """A customer reaches this stage: join the line or start service."""
        self.customers_arrived += 1
        if self.server.busy:
            # QueueOverflow propagates: the run cannot continue
            self.line.append(env.clock.current_time)
        else:
            self._begin_service(env, delay=0.0)

    def on_completion(self, env):
        """Service finished: pass the customer on, then serve the next one."""
        self.customers_served += 1
        env.router.advance(env, from_stage=self)
        if not self.line:
            self.server.status = ServerStatus.IDLE
            env.events.cancel(self.completion_kind)
            return
        t0 = self.line.pop_oldest()
        self._begin_service(env, delay=env.clock.current_time - t0)

    def _begin_service(self, env, delay: float):
        now = env.clock.current_time
        self.total_delay += delay
        self.customers_delayed += 1
        env.customers_delayed_total += 1
        self.server.status = ServerStatus.BUSY
        t_done = now + env.variates.exponential(self.server.mean_service_time)
        env.events.schedule(self.completion_kind, t_done)
        logger.debug("%s: start service at %.4f (delay %.4f), completes at %.4f",
                     self.name, now, delay, t_done)

    def accumulate(self, dt: float):
        self.area_queue_length += len(self.line) * dt
        self.area_server_busy += int(self.server.status) * dt

    def mean_delay(self) -> float:
        return self.total_delay / self.customers_delayed if self.customers_delayed > 0 else 0.0

    def snapshot(self) -> dict:
        return {
            "status": self.server.status,
            "line": self.line.snapshot(),
            "customers_arrived": self.customers_arrived,
            "customers_delayed": self.customers_delayed,
            "customers_served": self.customers_served,
            "total_delay": self.total_delay,
            "area_queue_length": self.area_queue_length,
            "area_server_busy": self.area_server_busy,
        }


def make_stages(cfg: SimConfig) -> Tuple[Stage, Stage]:
    """
    Create both stages from the run configuration.

    Returns
    -------
    (Stage, Stage)
        Stage 1 (exogenous arrivals) and stage 2 (fed by stage 1).
    """
    s1 = Stage("stage1", cfg.mean_service[0], cfg.queue_limit, EventKind.COMPLETE_STAGE1)
    s2 = Stage("stage2", cfg.mean_service[1], cfg.queue_limit, EventKind.COMPLETE_STAGE2)
    return s1, s2
