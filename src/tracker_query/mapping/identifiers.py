"""Resolve client supplied identifiers to metadata entities."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
from typing import TypeVar

from tracker_query.models.metadata import (
    DataElement,
    IdentifiableObject,
    OrganisationUnit,
    Program,
    ProgramStage,
    TrackedEntity,
    TrackedEntityAttribute,
    TrackedEntityType,
)
from tracker_query.services.ports import (
    DataElementStore,
    OrganisationUnitStore,
    ProgramStageStore,
    ProgramStore,
    TrackedEntityAttributeStore,
    TrackedEntityStore,
    TrackedEntityTypeStore,
)

from .errors import NotFoundError

_EntityT = TypeVar("_EntityT", bound=IdentifiableObject)
_PortT = TypeVar("_PortT")


class EntityKind(str, Enum):
    PROGRAM = "program"
    PROGRAM_STAGE = "program_stage"
    ORG_UNIT = "org_unit"
    TRACKED_ENTITY = "tracked_entity"
    TRACKED_ENTITY_TYPE = "tracked_entity_type"
    TRACKED_ENTITY_ATTRIBUTE = "tracked_entity_attribute"
    DATA_ELEMENT = "data_element"


EVENT_NOT_FOUND_MESSAGES: Mapping[EntityKind, str] = {
    EntityKind.PROGRAM: "Program is specified but does not exist: {uid}",
    EntityKind.PROGRAM_STAGE: "Program stage is specified but does not exist: {uid}",
    EntityKind.ORG_UNIT: "Org unit is specified but does not exist: {uid}",
    EntityKind.TRACKED_ENTITY: "Tracked entity is specified but does not exist: {uid}",
    EntityKind.TRACKED_ENTITY_TYPE: "Tracked entity type is specified but does not exist: {uid}",
    EntityKind.TRACKED_ENTITY_ATTRIBUTE: "Tracked entity attribute does not exist: {uid}",
    EntityKind.DATA_ELEMENT: "Data element does not exist: {uid}",
}

ENROLLMENT_NOT_FOUND_MESSAGES: Mapping[EntityKind, str] = {
    **EVENT_NOT_FOUND_MESSAGES,
    EntityKind.PROGRAM: "Program does not exist: {uid}",
    EntityKind.ORG_UNIT: "Organisation unit does not exist: {uid}",
    EntityKind.TRACKED_ENTITY: "Tracked entity does not exist: {uid}",
    EntityKind.TRACKED_ENTITY_TYPE: "Tracked entity type does not exist: {uid}",
}


class IdentifierResolver:
    """Look up entities by UID, failing with :class:`NotFoundError` when absent.

    ``resolve_*`` methods return ``None`` for an unset UID; the ``find_*``
    helpers never raise and are used where a miss is not an error by itself.
    Lookups for kinds a caller never resolves may be omitted.
    """

    def __init__(
        self,
        *,
        programs: ProgramStore | None = None,
        program_stages: ProgramStageStore | None = None,
        org_units: OrganisationUnitStore | None = None,
        tracked_entities: TrackedEntityStore | None = None,
        tracked_entity_types: TrackedEntityTypeStore | None = None,
        attributes: TrackedEntityAttributeStore | None = None,
        data_elements: DataElementStore | None = None,
        messages: Mapping[EntityKind, str] = EVENT_NOT_FOUND_MESSAGES,
    ) -> None:
        self._programs = programs
        self._program_stages = program_stages
        self._org_units = org_units
        self._tracked_entities = tracked_entities
        self._tracked_entity_types = tracked_entity_types
        self._attributes = attributes
        self._data_elements = data_elements
        self._messages = messages

    def _port(self, port: _PortT | None, kind: EntityKind) -> _PortT:
        if port is None:
            raise RuntimeError(f"No lookup configured for {kind.value}")
        return port

    def _require(
        self,
        kind: EntityKind,
        uid: str | None,
        lookup: Callable[[str], _EntityT | None],
    ) -> _EntityT | None:
        if not uid:
            return None
        entity = lookup(uid)
        if entity is None:
            raise NotFoundError(self._messages[kind].format(uid=uid), uid=uid)
        return entity

    def resolve_program(self, uid: str | None) -> Program | None:
        kind = EntityKind.PROGRAM
        return self._require(kind, uid, lambda v: self._port(self._programs, kind).get_program(v))

    def resolve_program_stage(self, uid: str | None) -> ProgramStage | None:
        kind = EntityKind.PROGRAM_STAGE
        return self._require(
            kind, uid, lambda v: self._port(self._program_stages, kind).get_program_stage(v)
        )

    def resolve_org_unit(self, uid: str | None) -> OrganisationUnit | None:
        return self._require(EntityKind.ORG_UNIT, uid, self.find_org_unit)

    def resolve_tracked_entity(self, uid: str | None) -> TrackedEntity | None:
        kind = EntityKind.TRACKED_ENTITY
        return self._require(
            kind, uid, lambda v: self._port(self._tracked_entities, kind).get_tracked_entity(v)
        )

    def resolve_tracked_entity_type(self, uid: str | None) -> TrackedEntityType | None:
        kind = EntityKind.TRACKED_ENTITY_TYPE
        return self._require(
            kind,
            uid,
            lambda v: self._port(self._tracked_entity_types, kind).get_tracked_entity_type(v),
        )

    def resolve_data_element(self, uid: str | None) -> DataElement | None:
        return self._require(EntityKind.DATA_ELEMENT, uid, self.find_data_element)

    def resolve_attribute(
        self,
        uid: str | None,
        candidates: Mapping[str, TrackedEntityAttribute] | None = None,
    ) -> TrackedEntityAttribute | None:
        lookup = candidates.get if candidates is not None else self.find_attribute
        return self._require(EntityKind.TRACKED_ENTITY_ATTRIBUTE, uid, lookup)

    def attributes_by_uid(self) -> dict[str, TrackedEntityAttribute]:
        """Index the full attribute enumeration by UID."""
        attributes = self._port(self._attributes, EntityKind.TRACKED_ENTITY_ATTRIBUTE)
        return {attribute.uid: attribute for attribute in attributes.get_all_tracked_entity_attributes()}

    def find_attribute(self, uid: str) -> TrackedEntityAttribute | None:
        attributes = self._port(self._attributes, EntityKind.TRACKED_ENTITY_ATTRIBUTE)
        return attributes.get_tracked_entity_attribute(uid)

    def find_data_element(self, uid: str) -> DataElement | None:
        return self._port(self._data_elements, EntityKind.DATA_ELEMENT).get_data_element(uid)

    def find_org_unit(self, uid: str) -> OrganisationUnit | None:
        return self._port(self._org_units, EntityKind.ORG_UNIT).get_organisation_unit(uid)


__all__ = [
    "ENROLLMENT_NOT_FOUND_MESSAGES",
    "EVENT_NOT_FOUND_MESSAGES",
    "EntityKind",
    "IdentifierResolver",
]
