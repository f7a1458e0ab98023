"""Map raw enrollment query parameters into :class:`EnrollmentQueryParams`."""

from __future__ import annotations

from collections.abc import Collection

from opentelemetry import trace

from tracker_query.config.settings import MappingSettings, get_settings
from tracker_query.models.metadata import OrganisationUnit
from tracker_query.models.params import EnrollmentOperationParams
from tracker_query.models.query import AuthorizedOrgUnitScope, EnrollmentQueryParams
from tracker_query.models.user import User
from tracker_query.observability.metrics import record_mapping, record_rejection
from tracker_query.services.ports import (
    CurrentUserProvider,
    OrganisationUnitStore,
    ProgramStore,
    TrackedEntityStore,
    TrackedEntityTypeStore,
    TrackerAccessManager,
)
from tracker_query.utils.logging import get_correlation_id, get_logger

from .errors import BadRequestError, MappingError
from .identifiers import ENROLLMENT_NOT_FOUND_MESSAGES, IdentifierResolver
from .order import resolve_field_order
from .org_units import (
    BROAD_MODES,
    OrgUnitScopeResolver,
    default_org_unit_mode,
    validate_org_unit_mode,
)
from .paging import resolve_paging, validate_update_window

logger = get_logger(__name__)
tracer = trace.get_tracer("tracker_query.mapping.enrollments")

QUERY_NAME = "enrollments"


class EnrollmentCriteriaMapper:
    """Validate enrollment query parameters against the current user's scope.

    Requested org units must exist and, for users without the superuser
    authority, sit inside the user's search hierarchy. For SELECTED, CHILDREN
    and DESCENDANTS the requested units form the scope; ACCESSIBLE, CAPTURE and
    ALL are resolved from the user's org unit sets.
    """

    def __init__(
        self,
        *,
        programs: ProgramStore,
        org_units: OrganisationUnitStore,
        tracked_entities: TrackedEntityStore,
        tracked_entity_types: TrackedEntityTypeStore,
        access_manager: TrackerAccessManager,
        current_user: CurrentUserProvider,
        settings: MappingSettings | None = None,
    ) -> None:
        self._settings = settings or get_settings().mapping
        self._current_user = current_user
        self._identifiers = IdentifierResolver(
            programs=programs,
            org_units=org_units,
            tracked_entities=tracked_entities,
            tracked_entity_types=tracked_entity_types,
            messages=ENROLLMENT_NOT_FOUND_MESSAGES,
        )
        self._scopes = OrgUnitScopeResolver(
            org_units=org_units,
            access_manager=access_manager,
            superuser_authority=self._settings.superuser_authority,
            search_all_authority=self._settings.search_all_org_units_authority,
        )

    def map(self, params: EnrollmentOperationParams) -> EnrollmentQueryParams:
        user = self._current_user.get_current_user()
        with tracer.start_as_current_span(
            "tracker.enrollments.map",
            attributes={
                "user": user.uid,
                "program": params.program_uid or "",
                "org_units": len(params.org_unit_uids),
                "org_unit_mode": params.org_unit_mode.value if params.org_unit_mode else "",
                "correlation_id": get_correlation_id() or "",
            },
        ):
            try:
                query_params = self._map(params, user)
            except MappingError as exc:
                record_rejection(QUERY_NAME, type(exc).__name__)
                logger.info(
                    "tracker.enrollments.map.rejected",
                    user=user.uid,
                    error=type(exc).__name__,
                    status=exc.problem.status,
                    detail=exc.message,
                )
                raise
        record_mapping(QUERY_NAME)
        logger.debug(
            "tracker.enrollments.map.completed",
            user=user.uid,
            org_unit_mode=query_params.organisation_unit_mode.value,
            org_units=len(query_params.organisation_units),
        )
        return query_params

    def _map(self, params: EnrollmentOperationParams, user: User) -> EnrollmentQueryParams:
        has_org_units = any(params.org_unit_uids)
        validate_org_unit_mode(params.org_unit_mode, has_org_units)
        organisation_units = self._resolve_org_units(params.org_unit_uids, user)
        program = self._identifiers.resolve_program(params.program_uid)

        mode = default_org_unit_mode(params.org_unit_mode, has_org_units)
        if mode in BROAD_MODES:
            scope = self._scopes.resolve_broad(user, mode, program)
        else:
            scope = AuthorizedOrgUnitScope(mode=mode, org_units=organisation_units)

        tracked_entity_type = self._identifiers.resolve_tracked_entity_type(
            params.tracked_entity_type_uid
        )
        tracked_entity = self._identifiers.resolve_tracked_entity(params.tracked_entity_uid)

        validate_update_window(params.last_updated, None, params.last_updated_duration)
        order = resolve_field_order(params.order, self._settings.orderable_enrollment_fields)
        paging = resolve_paging(params.paging, self._settings)

        return EnrollmentQueryParams(
            org_unit_scope=scope,
            paging=paging,
            organisation_units=organisation_units,
            program=program,
            program_status=params.program_status,
            program_start_date=params.program_start_date,
            program_end_date=params.program_end_date,
            tracked_entity_type=tracked_entity_type,
            tracked_entity=tracked_entity,
            follow_up=params.follow_up,
            last_updated=params.last_updated,
            last_updated_duration=params.last_updated_duration,
            include_deleted=params.include_deleted,
            order=order,
        )

    def _resolve_org_units(
        self, uids: Collection[str], user: User
    ) -> frozenset[OrganisationUnit]:
        search_scope = user.search_org_units_with_fallback
        is_super = user.is_super(self._settings.superuser_authority)
        resolved = set()
        for uid in sorted(uid for uid in uids if uid):
            org_unit = self._identifiers.resolve_org_unit(uid)
            assert org_unit is not None
            if not is_super and not org_unit.is_descendant_of(search_scope):
                raise BadRequestError(
                    f"Organisation unit is not part of the search scope: {org_unit.uid}"
                )
            resolved.add(org_unit)
        return frozenset(resolved)


__all__ = ["EnrollmentCriteriaMapper"]
