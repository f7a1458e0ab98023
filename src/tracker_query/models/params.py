"""Raw, client supplied query parameters.

These models describe what the upstream request decoder hands to the mappers.
Values are only shape-checked here; every cross-field rule and every lookup
happens in :mod:`tracker_query.mapping`.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import Field

from tracker_query.utils.validation import validate_uid

from .metadata import TrackerBaseModel


class OrganisationUnitSelectionMode(str, Enum):
    """How the requested org unit widens into the set of units to query."""

    SELECTED = "SELECTED"
    CHILDREN = "CHILDREN"
    DESCENDANTS = "DESCENDANTS"
    ACCESSIBLE = "ACCESSIBLE"
    CAPTURE = "CAPTURE"
    ALL = "ALL"


class AssignedUserSelectionMode(str, Enum):
    CURRENT = "CURRENT"
    PROVIDED = "PROVIDED"
    NONE = "NONE"
    ANY = "ANY"
    ALL = "ALL"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class EventStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    VISITED = "VISITED"
    SCHEDULE = "SCHEDULE"
    OVERDUE = "OVERDUE"
    SKIPPED = "SKIPPED"


class EnrollmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class UID(TrackerBaseModel):
    """A client value that is known to be a UID rather than a field name."""

    value: str

    @classmethod
    def of(cls, value: str) -> UID:
        return cls(value=validate_uid(value))

    def __str__(self) -> str:
        return self.value


class OrderParam(TrackerBaseModel):
    """One ``(key, direction)`` sort request.

    ``key`` is either a field name or a :class:`UID` pointing at a tracked
    entity attribute or data element.
    """

    key: UID | str
    direction: SortDirection = SortDirection.ASC

    @property
    def key_value(self) -> str:
        return str(self.key)


class PagingParams(TrackerBaseModel):
    page: int | None = None
    page_size: int | None = None
    total_pages: bool = False
    skip_paging: bool = False


class EventOperationParams(TrackerBaseModel):
    """Untrusted event query parameters."""

    program_uid: str | None = None
    program_stage_uid: str | None = None
    tracked_entity_uid: str | None = None
    org_unit_uid: str | None = None
    org_unit_mode: OrganisationUnitSelectionMode | None = None
    attribute_category_combo: str | None = None
    attribute_category_options: frozenset[str] = Field(default_factory=frozenset)
    attribute_filters: str | None = None
    data_element_filters: str | None = None
    assigned_users: frozenset[str] = Field(default_factory=frozenset)
    assigned_user_mode: AssignedUserSelectionMode | None = None
    order: tuple[OrderParam, ...] = ()
    event_status: EventStatus | None = None
    enrollment_status: EnrollmentStatus | None = None
    follow_up: bool | None = None
    occurred_after: datetime | None = None
    occurred_before: datetime | None = None
    updated_after: datetime | None = None
    updated_before: datetime | None = None
    updated_within: timedelta | None = None
    events: frozenset[str] = Field(default_factory=frozenset)
    include_deleted: bool = False
    paging: PagingParams = Field(default_factory=PagingParams)


class EnrollmentOperationParams(TrackerBaseModel):
    """Untrusted enrollment query parameters."""

    org_unit_uids: frozenset[str] = Field(default_factory=frozenset)
    org_unit_mode: OrganisationUnitSelectionMode | None = None
    last_updated: datetime | None = None
    last_updated_duration: timedelta | None = None
    program_uid: str | None = None
    program_status: EnrollmentStatus | None = None
    program_start_date: datetime | None = None
    program_end_date: datetime | None = None
    tracked_entity_type_uid: str | None = None
    tracked_entity_uid: str | None = None
    follow_up: bool | None = None
    include_deleted: bool = False
    order: tuple[OrderParam, ...] = ()
    paging: PagingParams = Field(default_factory=PagingParams)


__all__ = [
    "UID",
    "AssignedUserSelectionMode",
    "EnrollmentOperationParams",
    "EnrollmentStatus",
    "EventOperationParams",
    "EventStatus",
    "OrderParam",
    "OrganisationUnitSelectionMode",
    "PagingParams",
    "SortDirection",
]
