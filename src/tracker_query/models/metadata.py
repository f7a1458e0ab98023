"""Metadata entities referenced by tracker query parameters.

The entities are deliberately small: they carry the identifiers and the few
attributes the mappers reason about (program access level, org unit hierarchy
path). All models are frozen so they can key filter mappings and sit in the
org unit sets of an authorized scope.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TrackerBaseModel(BaseModel):
    """Base model that enforces strict, immutable validation."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class IdentifiableObject(TrackerBaseModel):
    """Anything addressable by a UID."""

    uid: str = Field(min_length=1)
    name: str | None = None


class AccessLevel(str, Enum):
    """Program access levels; everything but OPEN is treated as protected."""

    OPEN = "OPEN"
    AUDITED = "AUDITED"
    PROTECTED = "PROTECTED"
    CLOSED = "CLOSED"


class Program(IdentifiableObject):
    access_level: AccessLevel = AccessLevel.OPEN

    @property
    def is_protected_or_closed(self) -> bool:
        return self.access_level is not AccessLevel.OPEN


class ProgramStage(IdentifiableObject):
    program_uid: str | None = None


class TrackedEntityType(IdentifiableObject):
    pass


class TrackedEntity(IdentifiableObject):
    tracked_entity_type_uid: str | None = None


class TrackedEntityAttribute(IdentifiableObject):
    pass


class DataElement(IdentifiableObject):
    pass


class CategoryOptionCombo(IdentifiableObject):
    category_combo_uid: str | None = None
    category_option_uids: frozenset[str] = Field(default_factory=frozenset)


class OrganisationUnit(IdentifiableObject):
    """Node of the organisation unit hierarchy.

    ``path`` is the materialised path from the root, e.g. ``/ImspTQPwCqd/O6uvpzGd5pu``.
    A unit created without a path is treated as a root.
    """

    path: str = ""

    @model_validator(mode="before")
    @classmethod
    def _default_path(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("path") and data.get("uid"):
            return {**data, "path": f"/{data['uid']}"}
        return data

    @model_validator(mode="after")
    def _validate_path(self) -> OrganisationUnit:
        if not self.path.endswith(f"/{self.uid}"):
            raise ValueError(f"Org unit path must end with its own uid: {self.path}")
        return self

    @property
    def ancestor_uids(self) -> tuple[str, ...]:
        """UIDs of all ancestors, root first, excluding the unit itself."""
        return tuple(segment for segment in self.path.split("/") if segment)[:-1]

    @property
    def parent_uid(self) -> str | None:
        ancestors = self.ancestor_uids
        return ancestors[-1] if ancestors else None

    @property
    def level(self) -> int:
        return len(self.ancestor_uids) + 1

    def is_descendant_of(self, ancestors: Iterable[OrganisationUnit]) -> bool:
        """Return ``True`` if this unit equals or sits below any of ``ancestors``."""
        lineage = {*self.ancestor_uids, self.uid}
        return any(ancestor.uid in lineage for ancestor in ancestors)

    def child_path(self, uid: str) -> str:
        return f"{self.path}/{uid}"


__all__ = [
    "AccessLevel",
    "CategoryOptionCombo",
    "DataElement",
    "IdentifiableObject",
    "OrganisationUnit",
    "Program",
    "ProgramStage",
    "TrackedEntity",
    "TrackedEntityAttribute",
    "TrackedEntityType",
    "TrackerBaseModel",
]
