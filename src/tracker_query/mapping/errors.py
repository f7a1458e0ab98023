"""Exception hierarchy for query parameter mapping."""

from __future__ import annotations

from collections.abc import Iterable

from tracker_query.utils.errors import FoundationError


class MappingError(FoundationError):
    """Base error for rejected query parameters."""


class BadRequestError(MappingError):
    """Raised when client input is structurally or referentially invalid."""

    status = 400
    title = "Bad Request"


class ForbiddenError(MappingError):
    """Raised when the input is valid but the user lacks authorization."""

    status = 403
    title = "Forbidden"


class NotFoundError(BadRequestError):
    """Raised when a referenced identifier does not resolve."""

    def __init__(self, message: str, *, uid: str | None = None) -> None:
        super().__init__(message, extra={"uid": uid} if uid else None)
        self.uid = uid


class DuplicateFilterError(BadRequestError):
    """Raised when one field UID keys more than one filter group."""

    def __init__(self, parameter: str, kind: str, duplicates: Iterable[str]) -> None:
        self.parameter = parameter
        self.duplicates = tuple(sorted(duplicates))
        message = (
            f"{parameter} contains duplicate {kind} UIDs. "
            f"Each {kind} may be used in only one filter: {', '.join(self.duplicates)}"
        )
        super().__init__(message, extra={"duplicates": list(self.duplicates)})


class InvalidFilterError(BadRequestError):
    """Raised when a filter expression cannot be parsed."""


class InvalidOrderError(BadRequestError):
    """Raised when an order key is neither an allowed field nor a resolvable UID."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            f"Cannot order by '{key}'. Not a valid field, data element, or attribute."
        )


class InvalidOrgUnitModeError(BadRequestError):
    """Raised when the org unit mode conflicts with the supplied org units."""


__all__ = [
    "BadRequestError",
    "DuplicateFilterError",
    "ForbiddenError",
    "InvalidFilterError",
    "InvalidOrderError",
    "InvalidOrgUnitModeError",
    "MappingError",
    "NotFoundError",
]
