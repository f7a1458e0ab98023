"""Utility modules for the tracker query layer."""

from .errors import FoundationError, ProblemDetail


__all__ = ["FoundationError", "ProblemDetail"]
