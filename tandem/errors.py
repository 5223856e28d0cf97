# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# errors.py
# -----------------------------------------------------------------------------
# Purpose:
#   Fatal conditions raised by the engine. None of them is recoverable; the
#   experiment harness reports them and stops every remaining replication.
#
# Usage:
#   from tandem.errors import QueueOverflow
# -----------------------------------------------------------------------------

from __future__ import annotations


class TandemError(Exception):
    """Base class for every engine failure."""


class EventListExhausted(TandemError):
    """No event kind holds a scheduled time."""
    def __init__(self, time: float):
        super().__init__(f"Event list empty at time {time:f}")
        self.time = time


class QueueOverflow(TandemError):
    """A waiting line grew past its configured limit."""
    def __init__(self, stage: str, time: float, limit: int):
        super().__init__(
            f"Overflow of the {stage} waiting line (limit {limit}) at time {time:f}"
        )
        self.stage = stage
        self.time = time
        self.limit = limit


class InvalidConfiguration(TandemError, ValueError):
    """Rejected parameters, raised before any replication starts."""
