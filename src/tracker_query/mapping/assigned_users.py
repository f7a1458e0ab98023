"""Assigned user selection."""

from __future__ import annotations

from collections.abc import Collection

from tracker_query.models.params import AssignedUserSelectionMode
from tracker_query.models.query import AssignedUserQueryParam
from tracker_query.models.user import User
from tracker_query.utils.validation import is_valid_uid

from .errors import BadRequestError


def resolve_assigned_users(
    mode: AssignedUserSelectionMode | None,
    assigned_users: Collection[str],
    user: User,
) -> AssignedUserQueryParam:
    """Validate the assigned user mode against the supplied user UIDs.

    A user list without a mode implies ``PROVIDED``; neither implies ``ALL``.
    """
    users = frozenset(uid.strip() for uid in assigned_users if uid.strip())
    for uid in sorted(users):
        if not is_valid_uid(uid):
            raise BadRequestError(f"Invalid UID: {uid}")

    if mode is AssignedUserSelectionMode.PROVIDED and not users:
        raise BadRequestError(
            "Assigned User uid(s) must be specified if selected user mode is PROVIDED"
        )
    if users and mode is not None and mode is not AssignedUserSelectionMode.PROVIDED:
        raise BadRequestError(
            "Assigned User uid(s) cannot be specified if selected user mode is not PROVIDED"
        )

    if mode is None:
        mode = AssignedUserSelectionMode.PROVIDED if users else AssignedUserSelectionMode.ALL
    return AssignedUserQueryParam(mode=mode, assigned_users=users, current_user_uid=user.uid)


__all__ = ["resolve_assigned_users"]
