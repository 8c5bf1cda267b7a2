"""
Implication expansion for role permission selections.

When a role is saved, every selected level pulls in the lower-privilege
levels it depends on (editing requires viewing, deleting requires editing),
so the stored masks never hold a level without its prerequisites.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .levels import CATEGORIES, IMPLIED_LEVELS, VIEW_ACCESS_LEVELS, PermissionLevel
from .schema import PermissionSchema

logger = logging.getLogger(__name__)

RequestedLevels = dict[str, list[str]]


class ImplicationExpander:
    """Adds implied levels to a requested selection in place."""

    def __init__(self, schema: PermissionSchema):
        self._schema = schema

    def expand(
        self,
        requested: RequestedLevels,
        all_requested: Mapping[str, RequestedLevels] | None = None,
        is_second_round: bool = False,
    ) -> bool:
        """Add implied levels to ``requested``.

        Args:
            requested: Permission name -> selected levels for this bundle.
                Mutated in place.
            all_requested: Selections of every bundle, keyed by bundle.
                Unused by the base rules; available to bundles that
                derive grants from other bundles.
            is_second_round: True when called again after every bundle
                has been expanded once

        Returns:
            Whether this bundle needs a second round once all other
            bundles have been expanded. Always False for the base rules.
        """
        has_view_access = False

        for name in list(requested):
            levels = requested[name]
            if not isinstance(levels, list):
                levels = requested[name] = list(levels)

            # Appending while iterating picks up the implications of added
            # levels too, so one pass reaches the closure.
            for level in levels:
                for implied in IMPLIED_LEVELS.get(level, ()):
                    _, implied = self._schema.resolve(name, implied)
                    if self._schema.is_supported(name, implied) and implied not in levels:
                        levels.append(implied)

            if not has_view_access and VIEW_ACCESS_LEVELS.intersection(levels):
                has_view_access = True

        if CATEGORIES in self._schema and has_view_access:
            category_levels = requested.setdefault(CATEGORIES, [])
            if PermissionLevel.VIEW.value not in category_levels:
                logger.debug("Granting categories:view from view access elsewhere in bundle")
                category_levels.append(PermissionLevel.VIEW.value)

        return False
