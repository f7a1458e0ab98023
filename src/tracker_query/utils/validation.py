"""Identifier validation helpers shared across the mappers.

Key Responsibilities:
    - Recognise metadata UIDs (eleven characters, leading letter, alphanumeric)
    - Validate UIDs supplied by clients before any lookup is attempted

Side Effects:
    - None; functions raise ``ValueError`` on invalid data and otherwise return
      the identifier unchanged
"""

from __future__ import annotations

import re
from re import Pattern

# ==============================================================================
# COMPILED PATTERNS
# ==============================================================================

UID_LENGTH = 11
UID_PATTERN: Pattern[str] = re.compile(r"^[a-zA-Z][a-zA-Z0-9]{10}$")


def is_valid_uid(value: str | None) -> bool:
    """Return ``True`` when ``value`` has the shape of a metadata UID."""
    return value is not None and UID_PATTERN.match(value) is not None


def validate_uid(value: str) -> str:
    """Validate a metadata UID."""
    if not is_valid_uid(value):
        raise ValueError(f"Invalid UID: {value}")
    return value
