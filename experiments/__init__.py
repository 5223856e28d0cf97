"""Experiment harness: scenarios and the replication runner."""
