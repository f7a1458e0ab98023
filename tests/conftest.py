from __future__ import annotations

from dataclasses import dataclass

import pytest

from tracker_query.config.settings import MappingSettings
from tracker_query.mapping import EnrollmentCriteriaMapper, EventOperationParamsMapper
from tracker_query.models import OrganisationUnit, User
from tracker_query.services import (
    HierarchyTrackerAccessManager,
    InMemoryAclService,
    InMemoryMetadataStore,
    StaticCurrentUserProvider,
)

USER_UID = "xE7jOejl9FI"

ROOT = OrganisationUnit(uid="ImspTQPwCqd", name="Sierra Leone")
BO = OrganisationUnit(uid="O6uvpzGd5pu", name="Bo", path=ROOT.child_path("O6uvpzGd5pu"))
BOMBALI = OrganisationUnit(uid="fdc6uOvgoji", name="Bombali", path=ROOT.child_path("fdc6uOvgoji"))
BADJIA = OrganisationUnit(uid="YuQRtpLP10I", name="Badjia", path=BO.child_path("YuQRtpLP10I"))
BARGBO = OrganisationUnit(uid="vWbkYPRmKyS", name="Bargbo", path=BO.child_path("vWbkYPRmKyS"))
NGELEHUN = OrganisationUnit(
    uid="DiszpKrYNg8", name="Ngelehun CHC", path=BADJIA.child_path("DiszpKrYNg8")
)


@dataclass(frozen=True)
class OrgTree:
    """Sierra Leone > {Bo > {Badjia > Ngelehun CHC, Bargbo}, Bombali}."""

    root: OrganisationUnit = ROOT
    bo: OrganisationUnit = BO
    bombali: OrganisationUnit = BOMBALI
    badjia: OrganisationUnit = BADJIA
    bargbo: OrganisationUnit = BARGBO
    ngelehun: OrganisationUnit = NGELEHUN


@pytest.fixture
def tree() -> OrgTree:
    return OrgTree()


@pytest.fixture
def store(tree: OrgTree) -> InMemoryMetadataStore:
    return InMemoryMetadataStore(
        [tree.root, tree.bo, tree.bombali, tree.badjia, tree.bargbo, tree.ngelehun]
    )


@pytest.fixture
def acl() -> InMemoryAclService:
    return InMemoryAclService()


@pytest.fixture
def access_manager() -> HierarchyTrackerAccessManager:
    return HierarchyTrackerAccessManager()


@pytest.fixture
def user() -> User:
    return User(uid=USER_UID, username="tracker")


@pytest.fixture
def current_user(user: User) -> StaticCurrentUserProvider:
    return StaticCurrentUserProvider(user)


@pytest.fixture
def mapping_settings() -> MappingSettings:
    return MappingSettings()


@pytest.fixture
def event_mapper(
    store: InMemoryMetadataStore,
    acl: InMemoryAclService,
    access_manager: HierarchyTrackerAccessManager,
    current_user: StaticCurrentUserProvider,
    mapping_settings: MappingSettings,
) -> EventOperationParamsMapper:
    return EventOperationParamsMapper(
        programs=store,
        program_stages=store,
        org_units=store,
        tracked_entities=store,
        tracked_entity_types=store,
        attributes=store,
        data_elements=store,
        category_option_combos=store,
        acl=acl,
        access_manager=access_manager,
        current_user=current_user,
        settings=mapping_settings,
    )


@pytest.fixture
def enrollment_mapper(
    store: InMemoryMetadataStore,
    access_manager: HierarchyTrackerAccessManager,
    current_user: StaticCurrentUserProvider,
    mapping_settings: MappingSettings,
) -> EnrollmentCriteriaMapper:
    return EnrollmentCriteriaMapper(
        programs=store,
        org_units=store,
        tracked_entities=store,
        tracked_entity_types=store,
        access_manager=access_manager,
        current_user=current_user,
        settings=mapping_settings,
    )
