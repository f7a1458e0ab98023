"""Validation, resolution and authorization of tracker query parameters."""

from .enrollments import EnrollmentCriteriaMapper
from .errors import (
    BadRequestError,
    DuplicateFilterError,
    ForbiddenError,
    InvalidFilterError,
    InvalidOrderError,
    InvalidOrgUnitModeError,
    MappingError,
    NotFoundError,
)
from .events import EventOperationParamsMapper
from .filters import FilterParser, format_filters, parse_filter_groups
from .order import OrderResolver
from .org_units import OrgUnitScopeResolver, scope_org_units

__all__ = [
    "BadRequestError",
    "DuplicateFilterError",
    "EnrollmentCriteriaMapper",
    "EventOperationParamsMapper",
    "FilterParser",
    "ForbiddenError",
    "InvalidFilterError",
    "InvalidOrderError",
    "InvalidOrgUnitModeError",
    "MappingError",
    "NotFoundError",
    "OrderResolver",
    "OrgUnitScopeResolver",
    "format_filters",
    "parse_filter_groups",
    "scope_org_units",
]
