"""Aggregation, scoring and permission core for the training program console."""

__version__ = "1.0.0"
