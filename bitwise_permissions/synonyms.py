"""Synonym resolution between the collapsed and split level vocabularies."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from .levels import COLLAPSED_SYNONYMS, SPLIT_SYNONYMS

if TYPE_CHECKING:
    from .schema import PermissionSchema


def resolve_level(defined: Mapping[str, int] | None, level: str) -> str:
    """Map ``level`` onto the form ``defined`` actually carries.

    Applied once, never recursively. ``viewown`` becomes ``view`` when the
    name defines ``view``; ``view`` becomes ``viewown`` when the name defines
    ``viewown``. Anything else is returned unchanged.
    """
    if not defined or not level:
        return level

    collapsed = COLLAPSED_SYNONYMS.get(level)
    if collapsed is not None:
        return collapsed if collapsed in defined else level

    split = SPLIT_SYNONYMS.get(level)
    if split is not None and split in defined:
        return split

    return level


class SynonymResolver:
    """Resolves ``(name, level)`` pairs against a schema."""

    def __init__(self, schema: PermissionSchema):
        self._schema = schema

    def resolve(self, name: str, level: str) -> tuple[str, str]:
        """Return ``(name, canonical_level)`` for a requested pair."""
        return name, resolve_level(self._schema.levels(name), level)
