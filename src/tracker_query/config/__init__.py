"""Lightweight configuration package exports."""

from __future__ import annotations

from .settings import (
    ENVIRONMENT_DEFAULTS,
    AppSettings,
    Environment,
    LoggingSettings,
    MappingSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "ENVIRONMENT_DEFAULTS",
    "AppSettings",
    "Environment",
    "LoggingSettings",
    "MappingSettings",
    "get_settings",
    "load_settings",
]
