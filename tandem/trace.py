# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# trace.py
# -----------------------------------------------------------------------------
# Purpose:
#   Per-event debug trace: one line per processed event with the event kind,
#   clock, both queue lengths and both server states, written through the
#   "tandem.trace" logger at DEBUG level.
#
# Usage:
#   handler = attach_trace_file("debug.out"); ...; detach(handler)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging

TRACE = logging.getLogger("tandem.trace")

def trace_event(env, kind):
    if not TRACE.isEnabledFor(logging.DEBUG):
        return
    s1, s2 = env.stage1, env.stage2
    line = "CALL:%-16s TIME:%f  #Q1:%d #Q2:%d  SRV1:%d SRV2:%d"
    args = [kind.name, env.clock.current_time, len(s1.line), len(s2.line),
            int(s1.server.status), int(s2.server.status)]
    if env.transit is not None:
        line += "  TRANSIT:%d"
        args.append(env.transit.in_flight_count)
    TRACE.debug(line, *args)

def attach_trace_file(path: str) -> logging.Handler:
    """Send the trace to `path` (overwritten) and enable DEBUG on the logger."""
    handler = logging.FileHandler(path, mode="w")
    handler.setFormatter(logging.Formatter("%(message)s"))
    TRACE.addHandler(handler)
    TRACE.setLevel(logging.DEBUG)
    # keep the trace out of the console handlers
    TRACE.propagate = False
    return handler

def detach(handler: logging.Handler):
    TRACE.removeHandler(handler)
    handler.close()
    if not TRACE.handlers:
        TRACE.setLevel(logging.NOTSET)
        TRACE.propagate = True
