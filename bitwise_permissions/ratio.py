"""Granted/available counts for role editor progress indicators."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .levels import PermissionLevel
from .schema import PermissionSchema

_FULL = PermissionLevel.FULL.value


class RatioCalculator:
    """Counts how much of a schema a role's selection covers."""

    def __init__(self, schema: PermissionSchema):
        self._schema = schema

    def ratio(self, granted: Mapping[str, Iterable[str]]) -> tuple[int, int]:
        """Return ``(total_granted, total_available)``.

        ``full`` counts as one unit when it is a name's only level. Next to
        other levels it is left out of the available count, and holding it
        counts every other level of that name as granted.
        """
        total_granted = 0
        total_available = 0

        for name in self._schema.names():
            defined = self._schema.levels(name) or {}
            held = list(granted.get(name) or ())
            total_available += len(defined)

            if _FULL in defined:
                if len(defined) == 1:
                    if _FULL in held:
                        total_granted += 1
                    continue

                total_available -= 1
                if _FULL in held:
                    total_granted += len(defined) - 1
                    continue

            total_granted += len(held)

        return total_granted, total_available
