"""Org unit scope resolution.

The resolver turns an org unit selection mode, an optional requested org unit
and an optional program into the set of org units a user may query. The
program's access level decides which of the user's org unit sets bounds the
result: protected or closed programs use the capture scope, open programs (or
no program) use the search scope with capture fallback.
"""

from __future__ import annotations

from collections.abc import Iterable

from tracker_query.models.metadata import OrganisationUnit, Program
from tracker_query.models.params import OrganisationUnitSelectionMode
from tracker_query.models.query import AuthorizedOrgUnitScope
from tracker_query.models.user import User
from tracker_query.services.ports import OrganisationUnitStore, TrackerAccessManager
from tracker_query.utils.logging import get_logger

from .errors import ForbiddenError, InvalidOrgUnitModeError

logger = get_logger(__name__)

Mode = OrganisationUnitSelectionMode

MODES_REJECTING_ORG_UNITS = frozenset({Mode.ACCESSIBLE, Mode.CAPTURE})
MODES_REQUIRING_ORG_UNIT = frozenset({Mode.SELECTED, Mode.CHILDREN, Mode.DESCENDANTS})
BROAD_MODES = frozenset({Mode.ACCESSIBLE, Mode.CAPTURE, Mode.ALL})


def validate_org_unit_mode(mode: OrganisationUnitSelectionMode | None, has_org_units: bool) -> None:
    """Reject mode and org unit combinations that cannot be satisfied.

    Used for enrollment queries, where ACCESSIBLE and CAPTURE must not be
    combined with explicit org units.
    """
    if mode in MODES_REJECTING_ORG_UNITS and has_org_units:
        raise InvalidOrgUnitModeError(
            f"ouMode {mode.value} cannot be used with orgUnits. "
            "Please remove the orgUnit parameter and try again."
        )
    require_org_unit_for_mode(mode, has_org_units)


def require_org_unit_for_mode(
    mode: OrganisationUnitSelectionMode | None, has_org_units: bool
) -> None:
    if mode in MODES_REQUIRING_ORG_UNIT and not has_org_units:
        raise InvalidOrgUnitModeError(
            f"Org unit is required for ouMode: {mode.value}. "
            "Please add an org unit or use a different ouMode."
        )


def default_org_unit_mode(
    mode: OrganisationUnitSelectionMode | None, has_org_units: bool
) -> OrganisationUnitSelectionMode:
    if mode is not None:
        return mode
    return Mode.SELECTED if has_org_units else Mode.ACCESSIBLE


def scope_org_units(user: User, program: Program | None) -> frozenset[OrganisationUnit]:
    """Return the user's org units that bound queries against ``program``."""
    if program is not None and program.is_protected_or_closed:
        return user.organisation_units
    return user.search_org_units_with_fallback


def can_search_all_org_units(
    user: User, *, superuser_authority: str, search_all_authority: str
) -> bool:
    return user.is_super(superuser_authority) or user.has_authority(search_all_authority)


def no_access_to_org_unit(org_unit: OrganisationUnit) -> ForbiddenError:
    return ForbiddenError(f"User does not have access to orgUnit: {org_unit.uid}")


class OrgUnitScopeResolver:
    """Compute the :class:`AuthorizedOrgUnitScope` for a query."""

    def __init__(
        self,
        *,
        org_units: OrganisationUnitStore,
        access_manager: TrackerAccessManager,
        superuser_authority: str,
        search_all_authority: str,
    ) -> None:
        self._org_units = org_units
        self._access_manager = access_manager
        self._superuser_authority = superuser_authority
        self._search_all_authority = search_all_authority

    def resolve(
        self,
        user: User,
        mode: OrganisationUnitSelectionMode | None,
        org_unit: OrganisationUnit | None,
        program: Program | None,
    ) -> AuthorizedOrgUnitScope:
        """Compute the authorized scope for ``mode`` starting from ``org_unit``.

        ACCESSIBLE, CAPTURE and ALL ignore ``org_unit`` and derive the scope
        from the user's org unit sets.

        Raises:
            InvalidOrgUnitModeError: If the mode needs an org unit and none
                was given.
            ForbiddenError: If the user may not query the requested units.
        """
        require_org_unit_for_mode(mode, org_unit is not None)
        effective = default_org_unit_mode(mode, org_unit is not None)

        if effective in BROAD_MODES:
            return self.resolve_broad(user, effective, program)

        assert org_unit is not None
        if effective is Mode.SELECTED:
            if not self._access_manager.can_access(user, program, org_unit):
                raise no_access_to_org_unit(org_unit)
            return AuthorizedOrgUnitScope(mode=effective, org_units=frozenset({org_unit}))

        if effective is Mode.CHILDREN:
            candidates: Iterable[OrganisationUnit] = self._org_units.get_children(org_unit)
        else:
            candidates = self._org_units.get_descendants(org_unit)
        authorized = frozenset(candidates) & scope_org_units(user, program)
        if not authorized:
            raise no_access_to_org_unit(org_unit)
        logger.debug(
            "tracker.org_units.resolved",
            mode=effective.value,
            org_unit=org_unit.uid,
            authorized=len(authorized),
        )
        return AuthorizedOrgUnitScope(mode=effective, org_units=authorized)

    def resolve_broad(
        self,
        user: User,
        mode: OrganisationUnitSelectionMode,
        program: Program | None,
    ) -> AuthorizedOrgUnitScope:
        """Scope for modes that do not start from a requested org unit."""
        if mode is Mode.ALL:
            return self.resolve_all(user)
        if mode is Mode.CAPTURE:
            return AuthorizedOrgUnitScope(mode=mode, org_units=user.organisation_units)
        if mode is Mode.ACCESSIBLE:
            return AuthorizedOrgUnitScope(mode=mode, org_units=scope_org_units(user, program))
        raise ValueError(f"ouMode {mode.value} requires an org unit")

    def resolve_all(self, user: User) -> AuthorizedOrgUnitScope:
        if not can_search_all_org_units(
            user,
            superuser_authority=self._superuser_authority,
            search_all_authority=self._search_all_authority,
        ):
            raise ForbiddenError(
                "Current user is not authorized to query across all organisation units"
            )
        return AuthorizedOrgUnitScope(mode=Mode.ALL, unrestricted=True)


__all__ = [
    "BROAD_MODES",
    "MODES_REJECTING_ORG_UNITS",
    "MODES_REQUIRING_ORG_UNIT",
    "OrgUnitScopeResolver",
    "can_search_all_org_units",
    "default_org_unit_mode",
    "require_org_unit_for_mode",
    "scope_org_units",
    "validate_org_unit_mode",
]
