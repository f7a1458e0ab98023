"""Observability helpers for the mapping layer."""

from .metrics import record_mapping, record_rejection

__all__ = ["record_mapping", "record_rejection"]
