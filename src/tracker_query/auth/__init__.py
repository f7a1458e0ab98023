"""Authorization primitives shared by the mappers."""

from __future__ import annotations

from .authorities import Authorities

__all__ = ["Authorities"]
