"""Authority definitions consulted by the authorization checks."""

from __future__ import annotations


class Authorities:
    """Canonical authority names granted to users through their roles."""

    ALL = "ALL"
    SEARCH_IN_ALL_ORG_UNITS = "F_TRACKED_ENTITY_INSTANCE_SEARCH_IN_ALL_ORGUNITS"


__all__ = ["Authorities"]
