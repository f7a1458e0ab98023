"""The requesting principal and its org unit scopes."""

from __future__ import annotations

from pydantic import Field

from tracker_query.auth.authorities import Authorities

from .metadata import OrganisationUnit, TrackerBaseModel


class User(TrackerBaseModel):
    """Represents the authenticated user a query is mapped for.

    Attributes:
        uid: User identifier.
        username: Login name, used for logging only.
        organisation_units: Capture scope; units the user may capture data for.
        search_organisation_units: Search scope; units the user may search in.
        authorities: Authorities granted through the user's roles.

    Example:
        >>> district = OrganisationUnit(uid="DiszpKrYNg8", name="Ngelehun")
        >>> user = User(uid="xE7jOejl9FI", username="admin", organisation_units={district})
        >>> user.search_org_units_with_fallback == frozenset({district})
        True
    """

    uid: str = Field(min_length=1)
    username: str | None = None
    organisation_units: frozenset[OrganisationUnit] = Field(default_factory=frozenset)
    search_organisation_units: frozenset[OrganisationUnit] = Field(default_factory=frozenset)
    authorities: frozenset[str] = Field(default_factory=frozenset)

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities

    def is_super(self, superuser_authority: str = Authorities.ALL) -> bool:
        return self.has_authority(superuser_authority)

    @property
    def search_org_units_with_fallback(self) -> frozenset[OrganisationUnit]:
        """Search scope, or the capture scope when no search scope is assigned."""
        return self.search_organisation_units or self.organisation_units


__all__ = ["User"]
