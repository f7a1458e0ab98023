"""Prometheus metrics for query parameter mapping."""

from __future__ import annotations

from prometheus_client import Counter

MAPPING_COUNTER = Counter(
    "tracker_query_mappings_total",
    "Total query parameter mappings by outcome",
    labelnames=("query", "outcome"),
)

REJECTION_COUNTER = Counter(
    "tracker_query_rejections_total",
    "Rejected query parameter mappings by error type",
    labelnames=("query", "error"),
)


def record_mapping(query: str) -> None:
    MAPPING_COUNTER.labels(query=query, outcome="mapped").inc()


def record_rejection(query: str, error: str) -> None:
    MAPPING_COUNTER.labels(query=query, outcome="rejected").inc()
    REJECTION_COUNTER.labels(query=query, error=error).inc()


__all__ = [
    "MAPPING_COUNTER",
    "REJECTION_COUNTER",
    "record_mapping",
    "record_rejection",
]
