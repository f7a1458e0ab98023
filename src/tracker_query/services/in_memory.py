"""In-memory collaborator implementations.

Used by tests and by hosts that preload metadata. The metadata store satisfies
every lookup port in :mod:`tracker_query.services.ports`; org unit hierarchy
queries are answered from the materialised paths of the stored units.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence

from tracker_query.auth.authorities import Authorities
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


class InMemoryMetadataStore:
    """Dictionary backed lookups for every metadata type the mappers resolve."""

    def __init__(self, entities: Iterable[IdentifiableObject] = ()) -> None:
        self._entities: dict[type[IdentifiableObject], dict[str, IdentifiableObject]] = {}
        self.add(*entities)

    def add(self, *entities: IdentifiableObject) -> InMemoryMetadataStore:
        for entity in entities:
            self._entities.setdefault(type(entity), {})[entity.uid] = entity
        return self

    def _get(self, kind: type[IdentifiableObject], uid: str) -> IdentifiableObject | None:
        return self._entities.get(kind, {}).get(uid)

    def _all(self, kind: type[IdentifiableObject]) -> list[IdentifiableObject]:
        return list(self._entities.get(kind, {}).values())

    def get_program(self, uid: str) -> Program | None:
        return self._get(Program, uid)  # type: ignore[return-value]

    def get_program_stage(self, uid: str) -> ProgramStage | None:
        return self._get(ProgramStage, uid)  # type: ignore[return-value]

    def get_tracked_entity(self, uid: str) -> TrackedEntity | None:
        return self._get(TrackedEntity, uid)  # type: ignore[return-value]

    def get_tracked_entity_type(self, uid: str) -> TrackedEntityType | None:
        return self._get(TrackedEntityType, uid)  # type: ignore[return-value]

    def get_tracked_entity_attribute(self, uid: str) -> TrackedEntityAttribute | None:
        return self._get(TrackedEntityAttribute, uid)  # type: ignore[return-value]

    def get_all_tracked_entity_attributes(self) -> Sequence[TrackedEntityAttribute]:
        return self._all(TrackedEntityAttribute)  # type: ignore[return-value]

    def get_data_element(self, uid: str) -> DataElement | None:
        return self._get(DataElement, uid)  # type: ignore[return-value]

    def get_organisation_unit(self, uid: str) -> OrganisationUnit | None:
        return self._get(OrganisationUnit, uid)  # type: ignore[return-value]

    def get_children(self, org_unit: OrganisationUnit) -> Sequence[OrganisationUnit]:
        units: list[OrganisationUnit] = self._all(OrganisationUnit)  # type: ignore[assignment]
        return [unit for unit in units if unit.parent_uid == org_unit.uid]

    def get_descendants(self, org_unit: OrganisationUnit) -> Sequence[OrganisationUnit]:
        units: list[OrganisationUnit] = self._all(OrganisationUnit)  # type: ignore[assignment]
        return [unit for unit in units if unit.is_descendant_of((org_unit,))]

    def get_attribute_option_combo(
        self,
        category_combo_uid: str,
        category_option_uids: Collection[str],
        require_all: bool = True,
    ) -> CategoryOptionCombo | None:
        wanted = frozenset(category_option_uids)
        combos: list[CategoryOptionCombo] = self._all(CategoryOptionCombo)  # type: ignore[assignment]
        for combo in combos:
            if combo.category_combo_uid != category_combo_uid:
                continue
            if combo.category_option_uids == wanted:
                return combo
            if not require_all and wanted and wanted <= combo.category_option_uids:
                return combo
        return None


class InMemoryAclService:
    """Sharing decisions kept as explicit per-user overrides over a default."""

    def __init__(
        self,
        *,
        default_readable: bool = True,
        superuser_authority: str = Authorities.ALL,
    ) -> None:
        self._default = default_readable
        self._superuser_authority = superuser_authority
        self._overrides: dict[tuple[str, str], bool] = {}

    def grant(self, user: User, securable: IdentifiableObject) -> None:
        self._overrides[(user.uid, securable.uid)] = True

    def revoke(self, user: User, securable: IdentifiableObject) -> None:
        self._overrides[(user.uid, securable.uid)] = False

    def can_data_read(self, user: User, securable: IdentifiableObject) -> bool:
        if user.is_super(self._superuser_authority):
            return True
        return self._overrides.get((user.uid, securable.uid), self._default)


class HierarchyTrackerAccessManager:
    """Org unit access decided by hierarchy membership.

    A protected or closed program requires the unit to sit within the user's
    capture scope; an open program (or none) accepts the search scope, falling
    back to the capture scope when no search scope is assigned.
    """

    def __init__(self, *, superuser_authority: str = Authorities.ALL) -> None:
        self._superuser_authority = superuser_authority

    def can_access(
        self, user: User, program: Program | None, org_unit: OrganisationUnit
    ) -> bool:
        if user.is_super(self._superuser_authority):
            return True
        if program is not None and program.is_protected_or_closed:
            return org_unit.is_descendant_of(user.organisation_units)
        return org_unit.is_descendant_of(user.search_org_units_with_fallback)


class StaticCurrentUserProvider:
    """Current user accessor returning a fixed principal."""

    def __init__(self, user: User) -> None:
        self._user = user

    def set_user(self, user: User) -> None:
        self._user = user

    def get_current_user(self) -> User:
        return self._user


__all__ = [
    "HierarchyTrackerAccessManager",
    "InMemoryAclService",
    "InMemoryMetadataStore",
    "StaticCurrentUserProvider",
]
