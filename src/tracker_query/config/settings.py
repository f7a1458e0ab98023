"""Application settings for the tracker query mapping layer."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tracker_query.auth.authorities import Authorities


class Environment(str, Enum):
    """Deployment environments supported by the platform."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for application output")
    scrub_fields: Sequence[str] = Field(
        default_factory=lambda: ["password", "token", "secret", "authorization"],
        description="Fields that should be redacted in logs",
    )


DEFAULT_ORDERABLE_EVENT_FIELDS: tuple[str, ...] = (
    "assignedUser",
    "assignedUser.displayName",
    "attributeOptionCombo.uid",
    "completedBy",
    "completedDate",
    "created",
    "createdAtClient",
    "createdBy",
    "deleted",
    "dueDate",
    "enrollment.enrollmentDate",
    "enrollment.followup",
    "enrollment.incidentDate",
    "enrollment.program.uid",
    "enrollment.status",
    "enrollment.trackedEntity.uid",
    "enrollment.uid",
    "executionDate",
    "lastUpdatedAtClient",
    "lastUpdatedBy",
    "organisationUnit.uid",
    "programStage.uid",
    "status",
    "storedBy",
    "uid",
)

DEFAULT_ORDERABLE_ENROLLMENT_FIELDS: tuple[str, ...] = (
    "completedDate",
    "created",
    "createdAtClient",
    "enrollmentDate",
    "followup",
    "incidentDate",
    "lastUpdatedAtClient",
    "organisationUnit.uid",
    "program.uid",
    "status",
    "storedBy",
    "trackedEntity.uid",
    "uid",
)


class MappingSettings(BaseModel):
    """Knobs used by the parameter mappers."""

    orderable_event_fields: tuple[str, ...] = Field(default=DEFAULT_ORDERABLE_EVENT_FIELDS)
    orderable_enrollment_fields: tuple[str, ...] = Field(
        default=DEFAULT_ORDERABLE_ENROLLMENT_FIELDS
    )
    superuser_authority: str = Field(default=Authorities.ALL, description="Authority granting superuser")
    search_all_org_units_authority: str = Field(
        default=Authorities.SEARCH_IN_ALL_ORG_UNITS,
        description="Authority allowing ouMode=ALL queries",
    )
    default_page_size: int = Field(default=50, ge=1)
    max_page_size: int = Field(default=1000, ge=1)

    @field_validator("orderable_event_fields", "orderable_enrollment_fields")
    @classmethod
    def _strip_fields(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(item.strip() for item in value if item.strip())


class AppSettings(BaseSettings):
    """Top-level application settings."""

    environment: Environment = Environment.DEV
    debug: bool = False
    service_name: str = "tracker-query"
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    mapping: MappingSettings = Field(default_factory=MappingSettings)

    model_config = SettingsConfigDict(env_prefix="TQ_", env_nested_delimiter="__")


ENVIRONMENT_DEFAULTS: Mapping[Environment, dict[str, Any]] = {
    Environment.DEV: {
        "debug": True,
        "logging": {"level": "DEBUG"},
    },
    Environment.STAGING: {
        "logging": {"level": "INFO"},
    },
    Environment.PROD: {
        "logging": {"level": "WARNING"},
        "mapping": {"max_page_size": 500},
    },
}


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            target[key] = _deep_update(dict(current), value)
        else:
            target[key] = value
    return target


def load_settings(environment: str | None = None) -> AppSettings:
    """Load application settings with environment specific defaults applied."""
    env_value = (environment or os.getenv("TQ_ENV", "dev")).lower()
    env = Environment(env_value)
    defaults = ENVIRONMENT_DEFAULTS.get(env, {})
    try:
        base_settings = AppSettings()
    except ValidationError as err:
        raise RuntimeError(f"Invalid configuration: {err}") from err
    merged = base_settings.model_dump()
    merged = _deep_update(merged, defaults)
    merged["environment"] = env
    return AppSettings.model_validate(merged)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Cached accessor used by production code."""
    return load_settings()
