"""Validated query descriptors produced by the mappers.

Everything in this module is immutable. Mappings are exposed through
``MappingProxyType`` so the execution layer cannot alter a descriptor it has
been handed.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import TypeVar

from .metadata import (
    CategoryOptionCombo,
    DataElement,
    OrganisationUnit,
    Program,
    ProgramStage,
    TrackedEntity,
    TrackedEntityAttribute,
    TrackedEntityType,
)
from .params import (
    AssignedUserSelectionMode,
    EnrollmentStatus,
    EventStatus,
    OrganisationUnitSelectionMode,
    SortDirection,
)

_EntityT = TypeVar("_EntityT")


class QueryOperator(str, Enum):
    """Closed set of comparison operators accepted in filter expressions."""

    EQ = "eq"
    IEQ = "ieq"
    NE = "ne"
    NEQ = "neq"
    NIEQ = "nieq"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    LIKE = "like"
    NLIKE = "nlike"
    ILIKE = "ilike"
    NILIKE = "nilike"
    SW = "sw"
    EW = "ew"
    IN = "in"

    @classmethod
    def from_token(cls, token: str) -> QueryOperator | None:
        """Return the operator for ``token`` (case-insensitive) or ``None``."""
        try:
            return cls(token.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class QueryFilter:
    operator: QueryOperator
    filter: str


def freeze_filters(
    filters: Mapping[_EntityT, list[QueryFilter] | tuple[QueryFilter, ...]],
) -> Mapping[_EntityT, tuple[QueryFilter, ...]]:
    """Return a read-only copy of a parsed filter mapping, preserving key order."""
    return MappingProxyType({key: tuple(value) for key, value in filters.items()})


# ============================================================================
# ORDER TERMS
# ============================================================================


@dataclass(frozen=True, slots=True)
class FieldOrder:
    """Order by a static, allow-listed field."""

    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True, slots=True)
class AttributeOrder:
    """Order by the value of a tracked entity attribute."""

    attribute: TrackedEntityAttribute
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True, slots=True)
class DataElementOrder:
    """Order by the value of a data element."""

    data_element: DataElement
    direction: SortDirection = SortDirection.ASC


OrderTerm = FieldOrder | AttributeOrder | DataElementOrder


# ============================================================================
# SCOPES
# ============================================================================


@dataclass(frozen=True, slots=True)
class AuthorizedOrgUnitScope:
    """Org units a query may read.

    ``unrestricted`` is only set for ouMode ALL, in which case ``org_units`` is
    empty and no org unit restriction applies downstream. Otherwise an empty
    ``org_units`` means the query matches nothing.
    """

    mode: OrganisationUnitSelectionMode
    org_units: frozenset[OrganisationUnit] = frozenset()
    unrestricted: bool = False

    def includes(self, org_unit: OrganisationUnit) -> bool:
        return self.unrestricted or org_unit in self.org_units


@dataclass(frozen=True, slots=True)
class AssignedUserQueryParam:
    mode: AssignedUserSelectionMode
    assigned_users: frozenset[str] = frozenset()
    current_user_uid: str | None = None

    @property
    def has_assigned_users(self) -> bool:
        return bool(self.assigned_users)


@dataclass(frozen=True, slots=True)
class Paging:
    page: int
    page_size: int
    total_pages: bool = False
    skip_paging: bool = False


# ============================================================================
# DESCRIPTORS
# ============================================================================


@dataclass(frozen=True, slots=True)
class EventSearchParams:
    """Validated and authorized event query."""

    org_unit_scope: AuthorizedOrgUnitScope
    assigned_user_query_param: AssignedUserQueryParam
    paging: Paging
    program: Program | None = None
    program_stage: ProgramStage | None = None
    tracked_entity: TrackedEntity | None = None
    category_option_combo: CategoryOptionCombo | None = None
    org_unit: OrganisationUnit | None = None
    attributes: Mapping[TrackedEntityAttribute, tuple[QueryFilter, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    data_elements: Mapping[DataElement, tuple[QueryFilter, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    order: tuple[OrderTerm, ...] = ()
    event_status: EventStatus | None = None
    enrollment_status: EnrollmentStatus | None = None
    follow_up: bool | None = None
    occurred_after: datetime | None = None
    occurred_before: datetime | None = None
    updated_after: datetime | None = None
    updated_before: datetime | None = None
    updated_within: timedelta | None = None
    events: frozenset[str] = frozenset()
    include_deleted: bool = False

    @property
    def org_unit_mode(self) -> OrganisationUnitSelectionMode:
        return self.org_unit_scope.mode

    @property
    def accessible_org_units(self) -> frozenset[OrganisationUnit]:
        return self.org_unit_scope.org_units


@dataclass(frozen=True, slots=True)
class EnrollmentQueryParams:
    """Validated and authorized enrollment query."""

    org_unit_scope: AuthorizedOrgUnitScope
    paging: Paging
    organisation_units: frozenset[OrganisationUnit] = frozenset()
    program: Program | None = None
    program_status: EnrollmentStatus | None = None
    program_start_date: datetime | None = None
    program_end_date: datetime | None = None
    tracked_entity_type: TrackedEntityType | None = None
    tracked_entity: TrackedEntity | None = None
    follow_up: bool | None = None
    last_updated: datetime | None = None
    last_updated_duration: timedelta | None = None
    include_deleted: bool = False
    order: tuple[FieldOrder, ...] = ()

    @property
    def organisation_unit_mode(self) -> OrganisationUnitSelectionMode:
        return self.org_unit_scope.mode


__all__ = [
    "AssignedUserQueryParam",
    "AttributeOrder",
    "AuthorizedOrgUnitScope",
    "DataElementOrder",
    "EnrollmentQueryParams",
    "EventSearchParams",
    "FieldOrder",
    "OrderTerm",
    "Paging",
    "QueryFilter",
    "QueryOperator",
    "freeze_filters",
]
