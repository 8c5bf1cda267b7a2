"""Grant checks against a role's stored masks."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .levels import SPLIT_PAIRS
from .schema import PermissionSchema

logger = logging.getLogger(__name__)


class GrantEvaluator:
    """Decides whether a role's masks grant a ``(name, level)`` pair.

    Unsupported pairs carry bit 0 and therefore evaluate to False; nothing
    on this path raises.
    """

    def __init__(self, schema: PermissionSchema):
        self._schema = schema

    def level_bits(self, name: str, level: str) -> int:
        """Return every bit that satisfies a request for ``(name, level)``.

        A collapsed level (``view``, ``edit``...) asked of a name that only
        defines the own/other split is satisfied by either half.
        """
        name, resolved = self._schema.resolve(name, level)
        bits = self._schema.get_value(name, resolved)

        pair = SPLIT_PAIRS.get(level)
        if pair is not None and resolved != level:
            for half in pair:
                bits |= self._schema.get_value(name, half)

        return bits

    def is_granted(self, granted: Mapping[str, int], name: str, level: str) -> bool:
        """Check ``level`` on ``name`` against the role's masks.

        Args:
            granted: Permission name -> stored bitmask for the role
            name: Permission name (e.g. "leads")
            level: Requested level (e.g. "viewown")

        Returns:
            True when the full bit or any matching level bit is held
        """
        mask = granted.get(name)
        if mask is None:
            return False

        mask = int(mask)
        if self._schema.full_bit(name) & mask:
            return True

        allowed = bool(self.level_bits(name, level) & mask)
        if not allowed:
            logger.debug("Denied %s:%s for mask %d", name, level, mask)
        return allowed
