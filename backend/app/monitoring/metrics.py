"""Metric definitions for profile aggregation."""

from __future__ import annotations

from .registry import registry


profile_aggregations_total = registry.counter(
    "profile_aggregations_total",
    "Completed profile aggregations by final phase.",
    label_names=("phase",),
)

profile_degraded_fetches_total = registry.counter(
    "profile_degraded_fetches_total",
    "Sub-fetches that failed and were replaced by an empty or zero result.",
    label_names=("slice",),
)
