"""Problem detail helpers for consistent error reporting across the mappers.

Key Responsibilities:
    - Provide RFC 7807 compliant data structures used when a mapping request is
      rejected
    - Supply a base exception that carries problem details so the host API can
      translate rejections into responses without inspecting messages

Collaborators:
    - Upstream: ``tracker_query.mapping.errors`` derives the bad-request and
      forbidden error families from ``FoundationError``
    - Downstream: Host request handlers serialise :class:`ProblemDetail`
      instances into HTTP responses

Side Effects:
    - None; helpers are pure data containers
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

# ==============================================================================
# TYPE DEFINITIONS
# ==============================================================================

__all__ = ["FoundationError", "ProblemDetail"]


@dataclass(slots=True)
class ProblemDetail:
    """Lightweight problem details object compliant with RFC 7807."""

    title: str
    status: int
    detail: str | None = None
    type: str = "about:blank"
    instance: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def model_dump(self) -> dict[str, Any]:
        """Return a dictionary representation with optional fields dropped."""
        payload = {key: value for key, value in asdict(self).items() if value is not None}
        if not payload.get("extra"):
            payload.pop("extra", None)
        return payload

    def to_response(self) -> dict[str, Any]:
        """Alias for model_dump used by response writers."""
        return self.model_dump()


class FoundationError(RuntimeError):
    """Base exception that carries a :class:`ProblemDetail` instance."""

    status: int = 500
    title: str = "Internal error"

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        type: str = "about:blank",
        instance: str | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialise the exception with structured problem detail attributes.

        Args:
            message: Human readable description of the failure. It becomes both
                the exception message and the problem ``detail``.
            status: HTTP status code; defaults to the class level ``status``.
            type: Problem type URI, defaults to ``about:blank``.
            instance: Optional URI reference identifying the specific occurrence.
            extra: Additional attributes included in the serialized payload.
        """
        super().__init__(message)
        self.message = message
        self.problem = ProblemDetail(
            title=self.title,
            status=status if status is not None else self.status,
            detail=message,
            type=type,
            instance=instance,
            extra=extra or {},
        )
