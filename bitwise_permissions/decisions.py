"""Decision types for registry-level permission checks."""

from dataclasses import dataclass
from enum import Enum


class GrantAction(Enum):
    """How a list of permission checks is combined."""

    MATCH_ALL = "match_all"  # Every permission must be granted
    MATCH_ONE = "match_one"  # At least one permission must be granted
    RETURN_ARRAY = "return_array"  # Per-permission results


@dataclass
class AccessDecision:
    """Result of a single permission check."""

    allowed: bool
    reason: str
    permission: str
    level: str | None = None
