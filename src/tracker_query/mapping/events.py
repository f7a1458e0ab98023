"""Map raw event query parameters into an authorized :class:`EventSearchParams`.

Key Responsibilities:
    - Resolve every referenced program, program stage, tracked entity and org
      unit, failing with a bad request when a reference does not exist
    - Run the read access checks on the referenced securables in a fixed
      order and compute the org unit scope the query may read
    - Parse attribute and data element filters, sort keys and the assigned
      user selection into their validated forms

Collaborators:
    - Upstream: Host request handlers decode client parameters into
      :class:`EventOperationParams` and call :meth:`EventOperationParamsMapper.map`
    - Downstream: Metadata lookup ports, the ACL service, the tracker access
      manager and the current user provider

Side Effects:
    - Emits structured log events, Prometheus counters and a tracing span per
      mapping call; the mapper itself holds no per-request state
"""

from __future__ import annotations

from opentelemetry import trace

from tracker_query.config.settings import MappingSettings, get_settings
from tracker_query.models.params import EventOperationParams
from tracker_query.models.query import EventSearchParams
from tracker_query.models.user import User
from tracker_query.observability.metrics import record_mapping, record_rejection
from tracker_query.services.ports import (
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
from tracker_query.utils.logging import get_correlation_id, get_logger
from tracker_query.utils.validation import is_valid_uid

from .assigned_users import resolve_assigned_users
from .authorization import AuthorizationGate
from .errors import BadRequestError, MappingError
from .filters import FilterParser
from .identifiers import EVENT_NOT_FOUND_MESSAGES, IdentifierResolver
from .order import OrderResolver
from .org_units import OrgUnitScopeResolver
from .paging import resolve_paging, validate_update_window

logger = get_logger(__name__)
tracer = trace.get_tracer("tracker_query.mapping.events")

QUERY_NAME = "events"


class EventOperationParamsMapper:
    """Single entry point turning :class:`EventOperationParams` into a search descriptor."""

    def __init__(
        self,
        *,
        programs: ProgramStore,
        program_stages: ProgramStageStore,
        org_units: OrganisationUnitStore,
        tracked_entities: TrackedEntityStore,
        tracked_entity_types: TrackedEntityTypeStore,
        attributes: TrackedEntityAttributeStore,
        data_elements: DataElementStore,
        category_option_combos: CategoryOptionComboStore,
        acl: AclService,
        access_manager: TrackerAccessManager,
        current_user: CurrentUserProvider,
        settings: MappingSettings | None = None,
    ) -> None:
        self._settings = settings or get_settings().mapping
        self._current_user = current_user
        self._identifiers = IdentifierResolver(
            programs=programs,
            program_stages=program_stages,
            org_units=org_units,
            tracked_entities=tracked_entities,
            tracked_entity_types=tracked_entity_types,
            attributes=attributes,
            data_elements=data_elements,
            messages=EVENT_NOT_FOUND_MESSAGES,
        )
        self._gate = AuthorizationGate(acl=acl, category_option_combos=category_option_combos)
        self._scopes = OrgUnitScopeResolver(
            org_units=org_units,
            access_manager=access_manager,
            superuser_authority=self._settings.superuser_authority,
            search_all_authority=self._settings.search_all_org_units_authority,
        )
        self._filters = FilterParser(self._identifiers)
        self._order = OrderResolver(self._identifiers, self._settings.orderable_event_fields)

    def map(self, params: EventOperationParams) -> EventSearchParams:
        """Validate ``params`` and return the authorized search descriptor.

        Raises:
            BadRequestError: If a parameter is malformed, contradicts another
                parameter or references something that does not exist.
            ForbiddenError: If the current user may not read a referenced
                securable or the requested org units.
        """
        user = self._current_user.get_current_user()
        with tracer.start_as_current_span(
            "tracker.events.map",
            attributes={
                "user": user.uid,
                "program": params.program_uid or "",
                "org_unit": params.org_unit_uid or "",
                "org_unit_mode": params.org_unit_mode.value if params.org_unit_mode else "",
                "correlation_id": get_correlation_id() or "",
            },
        ):
            try:
                search_params = self._map(params, user)
            except MappingError as exc:
                record_rejection(QUERY_NAME, type(exc).__name__)
                logger.info(
                    "tracker.events.map.rejected",
                    user=user.uid,
                    error=type(exc).__name__,
                    status=exc.problem.status,
                    detail=exc.message,
                )
                raise
        record_mapping(QUERY_NAME)
        logger.debug(
            "tracker.events.map.completed",
            user=user.uid,
            org_unit_mode=search_params.org_unit_mode.value,
            org_units=len(search_params.accessible_org_units),
            attribute_filters=len(search_params.attributes),
            data_element_filters=len(search_params.data_elements),
            order_terms=len(search_params.order),
        )
        return search_params

    def _map(self, params: EventOperationParams, user: User) -> EventSearchParams:
        program = self._identifiers.resolve_program(params.program_uid)
        program_stage = self._identifiers.resolve_program_stage(params.program_stage_uid)
        tracked_entity = self._identifiers.resolve_tracked_entity(params.tracked_entity_uid)
        org_unit = self._identifiers.resolve_org_unit(params.org_unit_uid)

        category_option_combo = self._gate.check(
            user,
            program=program,
            program_stage=program_stage,
            category_combo_uid=params.attribute_category_combo,
            category_option_uids=params.attribute_category_options,
        )
        org_unit_scope = self._scopes.resolve(user, params.org_unit_mode, org_unit, program)

        attributes = self._filters.parse_attribute_filters(params.attribute_filters)
        data_elements = self._filters.parse_data_element_filters(params.data_element_filters)
        order = self._order.resolve(params.order)
        assigned_users = resolve_assigned_users(
            params.assigned_user_mode, params.assigned_users, user
        )

        validate_update_window(params.updated_after, params.updated_before, params.updated_within)
        for event_uid in sorted(params.events):
            if not is_valid_uid(event_uid):
                raise BadRequestError(f"Invalid UID: {event_uid}")
        paging = resolve_paging(params.paging, self._settings)

        return EventSearchParams(
            org_unit_scope=org_unit_scope,
            assigned_user_query_param=assigned_users,
            paging=paging,
            program=program,
            program_stage=program_stage,
            tracked_entity=tracked_entity,
            category_option_combo=category_option_combo,
            org_unit=org_unit,
            attributes=attributes,
            data_elements=data_elements,
            order=order,
            event_status=params.event_status,
            enrollment_status=params.enrollment_status,
            follow_up=params.follow_up,
            occurred_after=params.occurred_after,
            occurred_before=params.occurred_before,
            updated_after=params.updated_after,
            updated_before=params.updated_before,
            updated_within=params.updated_within,
            events=params.events,
            include_deleted=params.include_deleted,
        )


__all__ = ["EventOperationParamsMapper"]
