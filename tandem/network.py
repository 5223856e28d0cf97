# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# network.py
# -----------------------------------------------------------------------------
# Purpose:
#   Network wiring between the two stages. The Router decides where a
#   customer goes after stage 1: straight into stage 2, or into the transit
#   link that delays it by a uniform(0, bound) travel time.
#
# Design notes:
#   - Only one ARRIVE_STAGE2 event is ever scheduled. It always points at the
#     earliest eligible arrival among all customers in flight, so a customer
#     with a short transit time may overtake one that left stage 1 earlier.
#   - In-flight eligible times live in a min-heap.
#
# Usage:
#   router = Router(stage1, stage2, transit)
# -----------------------------------------------------------------------------

from __future__ import annotations
import heapq
import logging
from typing import List, Optional
from .queues import EventKind
from .stations import Stage

logger = logging.getLogger(__name__)

class TransitLink:
    """Customers travelling from stage 1 to stage 2.

    Attributes
    ----------
    bound : float
        Upper bound of the uniform transit time (minutes).
    in_flight_count : int
        Customers currently travelling.
    max_in_flight_seen : int
        High-water mark of in_flight_count.
    area_in_flight : float
        Time integral of in_flight_count.
    """
    def __init__(self, bound: float):
        self.bound = bound
        self._eligible: List[float] = []
        self.in_flight_count = 0
        self.max_in_flight_seen = 0
        self.area_in_flight = 0.0

    def next_arrival(self) -> Optional[float]:
        return self._eligible[0] if self._eligible else None

    def depart(self, env):
        """A customer leaves stage 1 and starts travelling."""
        d = env.variates.uniform(self.bound)
        heapq.heappush(self._eligible, env.clock.current_time + d)
        self.in_flight_count += 1
        if self.in_flight_count > self.max_in_flight_seen:
            self.max_in_flight_seen = self.in_flight_count
        self._reschedule(env)

    def arrive(self, env):
        """The earliest in-flight customer reaches stage 2."""
        heapq.heappop(self._eligible)
        self.in_flight_count -= 1
        self._reschedule(env)

    def _reschedule(self, env):
        t = self.next_arrival()
        if t is None:
            env.events.cancel(EventKind.ARRIVE_STAGE2)
        else:
            env.events.schedule(EventKind.ARRIVE_STAGE2, t)

    def accumulate(self, dt: float):
        self.area_in_flight += self.in_flight_count * dt

    def snapshot(self) -> dict:
        return {
            "eligible": tuple(sorted(self._eligible)),
            "in_flight_count": self.in_flight_count,
            "max_in_flight_seen": self.max_in_flight_seen,
            "area_in_flight": self.area_in_flight,
        }


class Router:
    def __init__(self, stage1: Stage, stage2: Stage, transit: Optional[TransitLink] = None):
        self.stage1 = stage1
        self.stage2 = stage2
        self.transit = transit

    # Advance after a service completion
    def advance(self, env, from_stage: Stage):
        if from_stage is self.stage1:
            if self.transit is not None:
                self.transit.depart(env)
                logger.debug("stage1 -> transit at %.4f, next transit arrival %.4f",
                             env.clock.current_time, self.transit.next_arrival())
            else:
                self.stage2.on_arrival(env)
        # stage 2 completions leave the system

    # Transit link delivers a customer to stage 2
    def on_transit_arrival(self, env):
        if self.transit is None:
            raise RuntimeError("ARRIVE_STAGE2 fired without a transit link")
        self.transit.arrive(env)
        self.stage2.on_arrival(env)
