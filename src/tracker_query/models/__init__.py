"""Data models exchanged between the request decoder, the mappers and the execution layer."""

from .metadata import (
    AccessLevel,
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
    UID,
    AssignedUserSelectionMode,
    EnrollmentOperationParams,
    EnrollmentStatus,
    EventOperationParams,
    EventStatus,
    OrderParam,
    OrganisationUnitSelectionMode,
    PagingParams,
    SortDirection,
)
from .query import (
    AssignedUserQueryParam,
    AttributeOrder,
    AuthorizedOrgUnitScope,
    DataElementOrder,
    EnrollmentQueryParams,
    EventSearchParams,
    FieldOrder,
    OrderTerm,
    Paging,
    QueryFilter,
    QueryOperator,
)
from .user import User


__all__ = [
    "UID",
    "AccessLevel",
    "AssignedUserQueryParam",
    "AssignedUserSelectionMode",
    "AttributeOrder",
    "AuthorizedOrgUnitScope",
    "CategoryOptionCombo",
    "DataElement",
    "DataElementOrder",
    "EnrollmentOperationParams",
    "EnrollmentQueryParams",
    "EnrollmentStatus",
    "EventOperationParams",
    "EventSearchParams",
    "EventStatus",
    "FieldOrder",
    "OrderParam",
    "OrderTerm",
    "OrganisationUnit",
    "OrganisationUnitSelectionMode",
    "Paging",
    "PagingParams",
    "Program",
    "ProgramStage",
    "QueryFilter",
    "QueryOperator",
    "SortDirection",
    "TrackedEntity",
    "TrackedEntityAttribute",
    "TrackedEntityType",
    "User",
]
