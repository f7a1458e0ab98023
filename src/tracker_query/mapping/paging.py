"""Paging and time window validation shared by the mappers."""

from __future__ import annotations

from datetime import datetime, timedelta

from tracker_query.config.settings import MappingSettings
from tracker_query.models.params import PagingParams
from tracker_query.models.query import Paging

from .errors import BadRequestError


def resolve_paging(paging: PagingParams, settings: MappingSettings) -> Paging:
    page = 1 if paging.page is None else paging.page
    page_size = settings.default_page_size if paging.page_size is None else paging.page_size
    if page < 1:
        raise BadRequestError("page must be greater than or equal to 1")
    if page_size < 1:
        raise BadRequestError("pageSize must be greater than or equal to 1")
    if page_size > settings.max_page_size and not paging.skip_paging:
        raise BadRequestError(
            f"pageSize must be less than or equal to {settings.max_page_size}"
        )
    return Paging(
        page=page,
        page_size=page_size,
        total_pages=paging.total_pages,
        skip_paging=paging.skip_paging,
    )


def validate_update_window(
    after: datetime | None,
    before: datetime | None,
    within: timedelta | None,
) -> None:
    """Reject a last-updated duration combined with explicit bounds."""
    if within is not None and (after is not None or before is not None):
        raise BadRequestError(
            "Last updated from and/or to and last updated duration cannot be specified simultaneously"
        )
    if after is not None and before is not None and after > before:
        raise BadRequestError("Last updated from must not be after last updated to")


__all__ = ["resolve_paging", "validate_update_window"]
