"""Protocol definitions for the collaborators the mappers depend on.

Each port is a narrow capability set. Hosts wire their persistence and access
control services in by satisfying these protocols; the in-memory adapters in
:mod:`tracker_query.services.in_memory` satisfy all of them.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import Protocol

from tracker_query.models.metadata import (
    CategoryOptionCombo,
    DataElement,
    IdentifiableObject,
    OrganisationUnit,
    Program,
    ProgramStage,
    TrackedEntity,
    TrackedEntityAttribute,
    TrackedEntityType,
)
from tracker_query.models.user import User


class ProgramStore(Protocol):
    def get_program(self, uid: str) -> Program | None:
        """Return the program with ``uid`` or ``None``."""


class ProgramStageStore(Protocol):
    def get_program_stage(self, uid: str) -> ProgramStage | None:
        """Return the program stage with ``uid`` or ``None``."""


class OrganisationUnitStore(Protocol):
    def get_organisation_unit(self, uid: str) -> OrganisationUnit | None:
        """Return the org unit with ``uid`` or ``None``."""

    def get_children(self, org_unit: OrganisationUnit) -> Sequence[OrganisationUnit]:
        """Return the immediate children of ``org_unit``."""

    def get_descendants(self, org_unit: OrganisationUnit) -> Sequence[OrganisationUnit]:
        """Return ``org_unit`` and every unit below it."""


class TrackedEntityStore(Protocol):
    def get_tracked_entity(self, uid: str) -> TrackedEntity | None:
        """Return the tracked entity with ``uid`` or ``None``."""


class TrackedEntityTypeStore(Protocol):
    def get_tracked_entity_type(self, uid: str) -> TrackedEntityType | None:
        """Return the tracked entity type with ``uid`` or ``None``."""


class TrackedEntityAttributeStore(Protocol):
    def get_tracked_entity_attribute(self, uid: str) -> TrackedEntityAttribute | None:
        """Return the attribute with ``uid`` or ``None``."""

    def get_all_tracked_entity_attributes(self) -> Sequence[TrackedEntityAttribute]:
        """Return every tracked entity attribute."""


class DataElementStore(Protocol):
    def get_data_element(self, uid: str) -> DataElement | None:
        """Return the data element with ``uid`` or ``None``."""


class CategoryOptionComboStore(Protocol):
    def get_attribute_option_combo(
        self,
        category_combo_uid: str,
        category_option_uids: Collection[str],
        require_all: bool = True,
    ) -> CategoryOptionCombo | None:
        """Return the combo of ``category_combo_uid`` made of the given options."""


class AclService(Protocol):
    def can_data_read(self, user: User, securable: IdentifiableObject) -> bool:
        """Return ``True`` when ``user`` may read data of ``securable``."""


class TrackerAccessManager(Protocol):
    def can_access(
        self, user: User, program: Program | None, org_unit: OrganisationUnit
    ) -> bool:
        """Return ``True`` when ``user`` may read tracker data in ``org_unit``."""


class CurrentUserProvider(Protocol):
    def get_current_user(self) -> User:
        """Return the principal the current request runs as."""


__all__ = [
    "AclService",
    "CategoryOptionComboStore",
    "CurrentUserProvider",
    "DataElementStore",
    "OrganisationUnitStore",
    "ProgramStageStore",
    "ProgramStore",
    "TrackedEntityAttributeStore",
    "TrackedEntityStore",
    "TrackedEntityTypeStore",
    "TrackerAccessManager",
]
