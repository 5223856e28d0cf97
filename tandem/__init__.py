"""
tandem package initializer.

This package contains the event-scheduling engine, the two service stages
with their waiting lines, the optional transit link between them, and the
statistics collection used by the tandem queueing model.
"""
__all__ = [
    "errors", "variates", "config", "queues", "stations", "network",
    "metrics", "simulation", "trace",
]
