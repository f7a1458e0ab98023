import pytest

from tracker_query.auth import Authorities
from tracker_query.mapping import ForbiddenError, InvalidOrgUnitModeError, OrgUnitScopeResolver
from tracker_query.mapping.org_units import (
    default_org_unit_mode,
    require_org_unit_for_mode,
    scope_org_units,
    validate_org_unit_mode,
)
from tracker_query.models import AccessLevel, OrganisationUnitSelectionMode, Program, User

Mode = OrganisationUnitSelectionMode

OPEN = Program(uid="IpHINAT79UW", access_level=AccessLevel.OPEN)
PROTECTED = Program(uid="ur1Edk5Oe2n", access_level=AccessLevel.PROTECTED)
CLOSED = Program(uid="WSGAb5XwJ3Y", access_level=AccessLevel.CLOSED)
AUDITED = Program(uid="eBAyeGv0exc", access_level=AccessLevel.AUDITED)


@pytest.fixture
def resolver(store, access_manager) -> OrgUnitScopeResolver:
    return OrgUnitScopeResolver(
        org_units=store,
        access_manager=access_manager,
        superuser_authority=Authorities.ALL,
        search_all_authority=Authorities.SEARCH_IN_ALL_ORG_UNITS,
    )


@pytest.fixture
def district_user(tree) -> User:
    return User(
        uid="kWF4eTtSJ6e",
        organisation_units=frozenset({tree.badjia}),
        search_organisation_units=frozenset({tree.bargbo, tree.ngelehun}),
    )


@pytest.mark.parametrize("program", [PROTECTED, CLOSED, AUDITED])
def test_scope_uses_capture_set_for_protected_programs(district_user, tree, program):
    assert scope_org_units(district_user, program) == {tree.badjia}


@pytest.mark.parametrize("program", [OPEN, None])
def test_scope_uses_search_set_for_open_or_missing_program(district_user, tree, program):
    assert scope_org_units(district_user, program) == {tree.bargbo, tree.ngelehun}


def test_scope_falls_back_to_capture_set_without_search_set(tree):
    user = User(uid="kWF4eTtSJ6e", organisation_units=frozenset({tree.bo}))

    assert scope_org_units(user, OPEN) == {tree.bo}


def test_default_mode_depends_on_org_unit_presence():
    assert default_org_unit_mode(None, True) is Mode.SELECTED
    assert default_org_unit_mode(None, False) is Mode.ACCESSIBLE
    assert default_org_unit_mode(Mode.CAPTURE, False) is Mode.CAPTURE


def test_validate_mode_accepts_all_with_or_without_org_units():
    validate_org_unit_mode(Mode.ALL, True)
    validate_org_unit_mode(Mode.ALL, False)
    validate_org_unit_mode(None, True)


def test_validate_mode_rejects_capture_with_org_units():
    with pytest.raises(InvalidOrgUnitModeError) as exc_info:
        validate_org_unit_mode(Mode.CAPTURE, True)

    assert str(exc_info.value) == (
        "ouMode CAPTURE cannot be used with orgUnits. "
        "Please remove the orgUnit parameter and try again."
    )


def test_descendants_intersect_with_scope_set(resolver, district_user, tree):
    scope = resolver.resolve(district_user, Mode.DESCENDANTS, tree.bo, OPEN)

    assert scope.mode is Mode.DESCENDANTS
    assert scope.org_units == {tree.bargbo, tree.ngelehun}
    assert scope.unrestricted is False


def test_descendants_include_requested_unit(resolver, tree):
    user = User(uid="kWF4eTtSJ6e", organisation_units=frozenset({tree.badjia}))

    scope = resolver.resolve(user, Mode.DESCENDANTS, tree.badjia, PROTECTED)

    assert scope.org_units == {tree.badjia}


def test_children_exclude_grandchildren(resolver, district_user, tree):
    scope = resolver.resolve(district_user, Mode.CHILDREN, tree.bo, OPEN)

    assert scope.org_units == {tree.bargbo}


def test_children_outside_scope_are_forbidden(resolver, district_user, tree):
    with pytest.raises(ForbiddenError, match=f"orgUnit: {tree.bombali.uid}"):
        resolver.resolve(district_user, Mode.CHILDREN, tree.bombali, OPEN)


def test_selected_superuser_bypasses_hierarchy(resolver, tree):
    superuser = User(uid="M5zQapPyTZI", authorities=frozenset({Authorities.ALL}))

    scope = resolver.resolve(superuser, Mode.SELECTED, tree.bombali, PROTECTED)

    assert scope.org_units == {tree.bombali}


def test_accessible_may_be_empty(resolver):
    user = User(uid="kWF4eTtSJ6e")

    scope = resolver.resolve(user, None, None, None)

    assert scope.mode is Mode.ACCESSIBLE
    assert scope.org_units == frozenset()
    assert scope.unrestricted is False


def test_all_scope_includes_every_unit(resolver, tree):
    user = User(
        uid="kWF4eTtSJ6e", authorities=frozenset({Authorities.SEARCH_IN_ALL_ORG_UNITS})
    )

    scope = resolver.resolve(user, Mode.ALL, None, None)

    assert scope.includes(tree.bombali)
    assert scope.includes(tree.ngelehun)


def test_resolve_broad_rejects_modes_that_need_an_org_unit(resolver, district_user):
    with pytest.raises(ValueError):
        resolver.resolve_broad(district_user, Mode.CHILDREN, None)


def test_require_org_unit_ignores_broad_modes():
    require_org_unit_for_mode(Mode.CAPTURE, True)
    require_org_unit_for_mode(Mode.ACCESSIBLE, False)

    with pytest.raises(InvalidOrgUnitModeError, match="Org unit is required for ouMode: CHILDREN"):
        require_org_unit_for_mode(Mode.CHILDREN, False)


def test_capture_ignores_requested_org_unit(resolver, district_user, tree):
    scope = resolver.resolve(district_user, Mode.CAPTURE, tree.bombali, OPEN)

    assert scope.mode is Mode.CAPTURE
    assert scope.org_units == {tree.badjia}


def test_accessible_ignores_requested_org_unit(resolver, district_user, tree):
    scope = resolver.resolve(district_user, Mode.ACCESSIBLE, tree.bombali, OPEN)

    assert scope.mode is Mode.ACCESSIBLE
    assert scope.org_units == {tree.bargbo, tree.ngelehun}
