# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Discrete-event primitives: the closed set of event kinds, the future
#   event list (one scheduled time per kind), the simulation clock, and the
#   FIFO waiting line each stage keeps in front of its server.
#
# Design notes:
#   - An unscheduled kind holds None rather than a huge sentinel time, and is
#     never selected.
#   - Ties on the minimum time go to the kind declared first in EventKind.
#   - WaitingLine is a deque of arrival times: O(1) append and pop-oldest.
#
# Usage:
#   from tandem.queues import EventKind, FutureEventList, WaitingLine
# -----------------------------------------------------------------------------

from __future__ import annotations
import enum
from collections import deque
from typing import Deque, Dict, Iterator, Optional, Tuple
from .errors import EventListExhausted, QueueOverflow

class EventKind(enum.Enum):
    """Event vocabulary. Declaration order is the tie-break order."""
    ARRIVE_STAGE1 = 1
    COMPLETE_STAGE1 = 2
    ARRIVE_STAGE2 = 3      # arrival from the transit link
    COMPLETE_STAGE2 = 4
    END_SIMULATION = 5


class SimulationClock:
    """Current simulated time and the time of the previous event (minutes)."""
    __slots__ = ("current_time", "time_of_last_event")
    def __init__(self):
        self.current_time: float = 0.0
        self.time_of_last_event: float = 0.0

    def advance(self, t: float):
        if t < self.current_time:
            raise ValueError(f"clock cannot move backwards: {t} < {self.current_time}")
        self.current_time = t

    def elapsed(self) -> float:
        """Return time since the previous event and move the marker to now."""
        dt = self.current_time - self.time_of_last_event
        self.time_of_last_event = self.current_time
        return dt


class FutureEventList:
    """One scheduled time slot per EventKind.

    The list never touches stage or server state: select_next() only reports
    which kind fires and moves the clock to its time.
    """
    def __init__(self, clock: SimulationClock):
        self.clock = clock
        self._slots: Dict[EventKind, Optional[float]] = {k: None for k in EventKind}

    def schedule(self, kind: EventKind, t: float):
        self._slots[kind] = t

    def cancel(self, kind: EventKind):
        self._slots[kind] = None

    def time_of(self, kind: EventKind) -> Optional[float]:
        return self._slots[kind]

    def is_scheduled(self, kind: EventKind) -> bool:
        return self._slots[kind] is not None

    def pending(self) -> Dict[EventKind, float]:
        return {k: t for k, t in self._slots.items() if t is not None}

    def select_next(self) -> EventKind:
        """Pick the kind with the earliest time and advance the clock to it.

        Raises
        ------
        EventListExhausted
            If no kind is scheduled.
        """
        best: Optional[EventKind] = None
        best_t = 0.0
        for kind in EventKind:
            t = self._slots[kind]
            if t is None:
                continue
            # strict comparison: the first kind scanned wins a tie
            if best is None or t < best_t:
                best, best_t = kind, t
        if best is None:
            raise EventListExhausted(self.clock.current_time)
        self.clock.advance(best_t)
        return best


class WaitingLine:
    """FIFO of customer arrival times in front of one server.

    Parameters
    ----------
    name : str
        Stage name used in overflow diagnostics.
    limit : int
        Largest allowed length; appending past it raises QueueOverflow.
    """
    def __init__(self, name: str, limit: int):
        self.name = name
        self.limit = limit
        self._times: Deque[float] = deque()

    def __len__(self) -> int:
        return len(self._times)

    def __iter__(self) -> Iterator[float]:
        return iter(self._times)

    def __eq__(self, other) -> bool:
        if not isinstance(other, WaitingLine):
            return NotImplemented
        return (self.name, self.limit, tuple(self._times)) == (other.name, other.limit, tuple(other._times))

    def append(self, t: float):
        if len(self._times) >= self.limit:
            raise QueueOverflow(self.name, t, self.limit)
        self._times.append(t)

    def pop_oldest(self) -> float:
        if not self._times:
            raise IndexError(f"pop from empty waiting line {self.name}")
        return self._times.popleft()

    def peek_oldest(self) -> Optional[float]:
        return self._times[0] if self._times else None

    def snapshot(self) -> Tuple[float, ...]:
        return tuple(self._times)
