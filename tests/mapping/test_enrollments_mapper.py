from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tracker_query.auth import Authorities
from tracker_query.mapping import (
    BadRequestError,
    ForbiddenError,
    InvalidOrderError,
    InvalidOrgUnitModeError,
    NotFoundError,
)
from tracker_query.models import (
    UID,
    EnrollmentOperationParams,
    EnrollmentStatus,
    FieldOrder,
    OrderParam,
    OrganisationUnitSelectionMode,
    Program,
    SortDirection,
    TrackedEntity,
    TrackedEntityType,
    User,
)

PROGRAM_UID = "IpHINAT79UW"
TRACKED_ENTITY_TYPE_UID = "nEenWmSyUEp"
TRACKED_ENTITY_UID = "dNpxRu1mWG5"
UNKNOWN_UID = "NeU85luyD4w"

Mode = OrganisationUnitSelectionMode


@pytest.fixture
def metadata(store):
    program = Program(uid=PROGRAM_UID, name="Child Programme")
    tracked_entity_type = TrackedEntityType(uid=TRACKED_ENTITY_TYPE_UID, name="Person")
    tracked_entity = TrackedEntity(
        uid=TRACKED_ENTITY_UID, tracked_entity_type_uid=TRACKED_ENTITY_TYPE_UID
    )
    store.add(program, tracked_entity_type, tracked_entity)
    return program, tracked_entity_type, tracked_entity


@pytest.fixture
def search_user(current_user, tree) -> User:
    user = User(
        uid="kWF4eTtSJ6e",
        username="district",
        organisation_units=frozenset({tree.badjia}),
        search_organisation_units=frozenset({tree.bo}),
    )
    current_user.set_user(user)
    return user


def full_params(org_unit_uids, mode, **overrides) -> EnrollmentOperationParams:
    values = {
        "org_unit_uids": org_unit_uids,
        "org_unit_mode": mode,
        "program_uid": PROGRAM_UID,
        "program_status": EnrollmentStatus.ACTIVE,
        "tracked_entity_type_uid": TRACKED_ENTITY_TYPE_UID,
        "tracked_entity_uid": TRACKED_ENTITY_UID,
        "follow_up": False,
    }
    values.update(overrides)
    return EnrollmentOperationParams(**values)


def test_maps_correctly_when_org_unit_exists_and_user_in_scope(
    enrollment_mapper, metadata, search_user, tree
):
    program, tracked_entity_type, tracked_entity = metadata

    params = enrollment_mapper.map(full_params({tree.badjia.uid}, Mode.DESCENDANTS))

    assert params.organisation_units == {tree.badjia}
    assert params.program == program
    assert params.tracked_entity_type == tracked_entity_type
    assert params.tracked_entity == tracked_entity
    assert params.program_status is EnrollmentStatus.ACTIVE
    assert params.org_unit_scope.org_units == {tree.badjia}


def test_fails_when_org_unit_does_not_exist(enrollment_mapper, metadata, search_user):
    with pytest.raises(NotFoundError) as exc_info:
        enrollment_mapper.map(full_params({UNKNOWN_UID}, Mode.DESCENDANTS))

    assert str(exc_info.value) == f"Organisation unit does not exist: {UNKNOWN_UID}"


def test_fails_when_org_unit_not_in_search_scope(enrollment_mapper, metadata, search_user, tree):
    with pytest.raises(BadRequestError) as exc_info:
        enrollment_mapper.map(full_params({tree.bombali.uid}, Mode.DESCENDANTS))

    assert str(exc_info.value) == (
        f"Organisation unit is not part of the search scope: {tree.bombali.uid}"
    )
    assert exc_info.value.problem.status == 400
    assert not isinstance(exc_info.value, ForbiddenError)


def test_superuser_may_request_org_unit_outside_search_scope(
    enrollment_mapper, metadata, current_user, tree
):
    current_user.set_user(User(uid="M5zQapPyTZI", authorities=frozenset({Authorities.ALL})))

    params = enrollment_mapper.map(full_params({tree.bombali.uid}, Mode.SELECTED))

    assert params.organisation_units == {tree.bombali}


@pytest.mark.parametrize("mode", [Mode.ACCESSIBLE, Mode.CAPTURE])
def test_fails_when_org_unit_supplied_with_mode(enrollment_mapper, metadata, search_user, tree, mode):
    with pytest.raises(InvalidOrgUnitModeError) as exc_info:
        enrollment_mapper.map(full_params({tree.badjia.uid}, mode))

    assert str(exc_info.value).startswith(f"ouMode {mode.value} cannot be used with orgUnits.")


@pytest.mark.parametrize("mode", [Mode.ACCESSIBLE, Mode.CAPTURE])
def test_checks_mode_before_resolving_org_units(enrollment_mapper, metadata, search_user, mode):
    with pytest.raises(InvalidOrgUnitModeError) as exc_info:
        enrollment_mapper.map(full_params({UNKNOWN_UID}, mode))

    assert str(exc_info.value).startswith(f"ouMode {mode.value} cannot be used with orgUnits.")


@pytest.mark.parametrize("mode", [Mode.SELECTED, Mode.DESCENDANTS, Mode.CHILDREN])
def test_maps_org_unit_mode_when_org_unit_supplied(
    enrollment_mapper, metadata, search_user, tree, mode
):
    params = enrollment_mapper.map(full_params({tree.badjia.uid}, mode))

    assert params.organisation_unit_mode is mode


def test_defaults_to_selected_when_org_unit_supplied(
    enrollment_mapper, metadata, search_user, tree
):
    params = enrollment_mapper.map(full_params({tree.badjia.uid}, None))

    assert params.organisation_unit_mode is Mode.SELECTED


def test_defaults_to_accessible_search_scope_without_org_units(
    enrollment_mapper, metadata, search_user, tree
):
    params = enrollment_mapper.map(full_params(frozenset(), None))

    assert params.organisation_unit_mode is Mode.ACCESSIBLE
    assert params.org_unit_scope.org_units == {tree.bo}
    assert params.organisation_units == frozenset()


@pytest.mark.parametrize("authority", [Authorities.ALL, Authorities.SEARCH_IN_ALL_ORG_UNITS])
def test_maps_params_when_mode_all_and_user_authorized(
    enrollment_mapper, metadata, current_user, tree, authority
):
    current_user.set_user(
        User(
            uid="M5zQapPyTZI",
            search_organisation_units=frozenset({tree.bo}),
            authorities=frozenset({authority}),
        )
    )

    params = enrollment_mapper.map(full_params({tree.badjia.uid}, Mode.ALL))

    assert params.organisation_unit_mode is Mode.ALL
    assert params.org_unit_scope.unrestricted is True


def test_fails_when_mode_all_and_user_not_authorized(
    enrollment_mapper, metadata, search_user, tree
):
    with pytest.raises(ForbiddenError) as exc_info:
        enrollment_mapper.map(full_params({tree.badjia.uid}, Mode.ALL))

    assert str(exc_info.value) == (
        "Current user is not authorized to query across all organisation units"
    )


@pytest.mark.parametrize(
    ("override", "message"),
    [
        ({"program_uid": UNKNOWN_UID}, f"Program does not exist: {UNKNOWN_UID}"),
        (
            {"tracked_entity_type_uid": UNKNOWN_UID},
            f"Tracked entity type does not exist: {UNKNOWN_UID}",
        ),
        ({"tracked_entity_uid": UNKNOWN_UID}, f"Tracked entity does not exist: {UNKNOWN_UID}"),
    ],
)
def test_fails_when_referenced_metadata_does_not_exist(
    enrollment_mapper, metadata, search_user, tree, override, message
):
    with pytest.raises(NotFoundError) as exc_info:
        enrollment_mapper.map(full_params({tree.badjia.uid}, Mode.SELECTED, **override))

    assert str(exc_info.value) == message


def test_rejects_last_updated_with_duration(enrollment_mapper, metadata, search_user, tree):
    params = full_params(
        {tree.badjia.uid},
        Mode.SELECTED,
        last_updated=datetime(2024, 3, 1, tzinfo=timezone.utc),
        last_updated_duration=timedelta(days=1),
    )

    with pytest.raises(BadRequestError, match="cannot be specified simultaneously"):
        enrollment_mapper.map(params)


def test_maps_static_order_fields(enrollment_mapper, metadata, search_user, tree):
    params = full_params(
        {tree.badjia.uid},
        Mode.SELECTED,
        order=(
            OrderParam(key="enrollmentDate", direction=SortDirection.DESC),
            OrderParam(key="created"),
        ),
    )

    mapped = enrollment_mapper.map(params)

    assert mapped.order == (
        FieldOrder("enrollmentDate", SortDirection.DESC),
        FieldOrder("created", SortDirection.ASC),
    )


def test_rejects_uid_order_keys(enrollment_mapper, metadata, search_user, tree):
    params = full_params(
        {tree.badjia.uid}, Mode.SELECTED, order=(OrderParam(key=UID.of("TvjwTPToKHO")),)
    )

    with pytest.raises(InvalidOrderError, match="Cannot order by 'TvjwTPToKHO'"):
        enrollment_mapper.map(params)
