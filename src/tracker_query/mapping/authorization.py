"""Read access checks on the securables referenced by a query."""

from __future__ import annotations

from collections.abc import Collection

from tracker_query.models.metadata import CategoryOptionCombo, Program, ProgramStage
from tracker_query.models.user import User
from tracker_query.services.ports import AclService, CategoryOptionComboStore

from .errors import BadRequestError, ForbiddenError, NotFoundError


class AuthorizationGate:
    """Sequence the per-securable read checks; the first failure wins."""

    def __init__(self, *, acl: AclService, category_option_combos: CategoryOptionComboStore) -> None:
        self._acl = acl
        self._category_option_combos = category_option_combos

    def check(
        self,
        user: User,
        *,
        program: Program | None,
        program_stage: ProgramStage | None,
        category_combo_uid: str | None,
        category_option_uids: Collection[str],
    ) -> CategoryOptionCombo | None:
        """Run the stage, program and attribute option combo checks in order.

        Returns the resolved attribute option combo when one was requested.
        """
        if program_stage is not None and not self._acl.can_data_read(user, program_stage):
            raise ForbiddenError(f"User has no access to program stage: {program_stage.uid}")
        if program is not None and not self._acl.can_data_read(user, program):
            raise ForbiddenError(f"User has no access to program: {program.uid}")
        return self.check_attribute_option_combo(user, category_combo_uid, category_option_uids)

    def check_attribute_option_combo(
        self,
        user: User,
        category_combo_uid: str | None,
        category_option_uids: Collection[str],
    ) -> CategoryOptionCombo | None:
        if not category_combo_uid and not category_option_uids:
            return None
        if not category_combo_uid or not category_option_uids:
            raise BadRequestError(
                "attributeCategoryCombo and attributeCategoryOptions must be specified together"
            )
        combo = self._category_option_combos.get_attribute_option_combo(
            category_combo_uid, category_option_uids, True
        )
        if combo is None:
            raise NotFoundError(
                "Attribute option combo does not exist for given category combo "
                f"and category options: {category_combo_uid}",
                uid=category_combo_uid,
            )
        if not self._acl.can_data_read(user, combo):
            raise ForbiddenError(
                f"User has no access to attribute category option combo: {combo.uid}"
            )
        return combo


__all__ = ["AuthorizationGate"]
