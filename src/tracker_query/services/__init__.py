"""Collaborator ports and their in-memory implementations."""

from .in_memory import (
    HierarchyTrackerAccessManager,
    InMemoryAclService,
    InMemoryMetadataStore,
    StaticCurrentUserProvider,
)
from .ports import (
    AclService,
    CategoryOptionComboStore,
    CurrentUserProvider,
    DataElementStore,
    OrganisationUnitStore,
    ProgramStageStore,
    ProgramStore,
    TrackedEntityAttributeStore,
    TrackedEntityStore,
    TrackedEntityTypeStore,
    TrackerAccessManager,
)

__all__ = [
    "AclService",
    "CategoryOptionComboStore",
    "CurrentUserProvider",
    "DataElementStore",
    "HierarchyTrackerAccessManager",
    "InMemoryAclService",
    "InMemoryMetadataStore",
    "OrganisationUnitStore",
    "ProgramStageStore",
    "ProgramStore",
    "StaticCurrentUserProvider",
    "TrackedEntityAttributeStore",
    "TrackedEntityStore",
    "TrackedEntityTypeStore",
    "TrackerAccessManager",
]
