"""Aggregation of parsed login events for ssh-stat."""

from .aggregator import Aggregator, sort_events

__all__ = [
    "Aggregator",
    "sort_events",
]
