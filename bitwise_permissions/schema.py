"""
Per-bundle permission schema.

A schema maps each permission name to the levels it supports and the bit
assigned to each level. It is populated once when a bundle defines its
permissions and is treated as read-only afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .cache import LevelNameCache
from .exceptions import SchemaValidationError
from .levels import PermissionLevel, SchemaFlavor, flavor_levels
from .synonyms import SynonymResolver

logger = logging.getLogger(__name__)

_KNOWN_LEVELS = frozenset(level.value for level in PermissionLevel)


def _as_names(names: str | Iterable[str]) -> list[str]:
    if isinstance(names, str):
        return [names]
    return list(names)


class PermissionSchema:
    """Permission names and their ``level -> bit`` layout for one bundle."""

    def __init__(self, cache_size: int = 256):
        self._permissions: dict[str, dict[str, int]] = {}
        self._resolver = SynonymResolver(self)
        self._cache = LevelNameCache(max_entries=cache_size)

    # =========================================================================
    # Construction
    # =========================================================================

    def add_standard_permissions(
        self, names: str | Iterable[str], include_publish: bool = True
    ) -> None:
        """Install view, edit, create, delete and full (plus publish) for each name."""
        self._install(names, SchemaFlavor.STANDARD, include_publish)

    def add_extended_permissions(
        self, names: str | Iterable[str], include_publish: bool = True
    ) -> None:
        """Install the own/other split levels, create and full for each name."""
        self._install(names, SchemaFlavor.EXTENDED, include_publish)

    def add_manage_permission(self, names: str | Iterable[str]) -> None:
        """Install a single ``manage`` bit for each name."""
        self._install(names, SchemaFlavor.MANAGE, False)

    def define(self, name: str, levels: Mapping[str, int]) -> None:
        """Install a hand-written ``level -> bit`` layout for ``name``.

        Nothing is checked here; call :meth:`validate` once the bundle is built.
        """
        self._permissions[name] = dict(levels)
        self._cache.clear()

    def _install(self, names: str | Iterable[str], flavor: SchemaFlavor, include_publish: bool) -> None:
        for name in _as_names(names):
            if name in self._permissions:
                logger.debug("Overwriting permission definition for %s", name)
            self._permissions[name] = flavor_levels(flavor, include_publish)
        self._cache.clear()

    # =========================================================================
    # Lookups
    # =========================================================================

    def levels(self, name: str) -> Mapping[str, int] | None:
        """Return the read-only ``level -> bit`` mapping for ``name``, if defined."""
        defined = self._permissions.get(name)
        if defined is None:
            return None
        return MappingProxyType(defined)

    def names(self) -> list[str]:
        """Permission names in definition order."""
        return list(self._permissions)

    def as_dict(self) -> dict[str, dict[str, int]]:
        """Return a copy of the whole schema."""
        return {name: dict(levels) for name, levels in self._permissions.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._permissions

    def __len__(self) -> int:
        return len(self._permissions)

    def resolve(self, name: str, level: str) -> tuple[str, str]:
        """Canonicalise ``(name, level)`` through the synonym tables."""
        return self._resolver.resolve(name, level)

    def is_supported(self, name: str, level: str = "") -> bool:
        """Check that ``name`` exists or, when ``level`` is given, that the resolved pair exists."""
        name, level = self.resolve(name, level)
        defined = self._permissions.get(name)
        if defined is None:
            return False
        if not level:
            return True
        return level in defined

    def get_value(self, name: str, level: str) -> int:
        """Return the bit for the resolved ``(name, level)``, or 0 when unsupported."""
        name, level = self.resolve(name, level)
        return self._permissions.get(name, {}).get(level, 0)

    def full_bit(self, name: str) -> int:
        """Return the ``full`` bit for ``name``, or 0 when it has none."""
        return self._permissions.get(name, {}).get(PermissionLevel.FULL.value, 0)

    # =========================================================================
    # Persistence round trip
    # =========================================================================

    def to_bitmask(self, requested: Mapping[str, Iterable[str]]) -> dict[str, int]:
        """OR together the bits of every requested level, per supported name."""
        masks: dict[str, int] = {}
        for name, requested_levels in requested.items():
            if name not in self._permissions:
                logger.debug("Skipping unsupported permission name %s", name)
                continue
            mask = 0
            for level in requested_levels:
                mask |= self.get_value(name, level)
            masks[name] = mask
        return masks

    def bits_to_levels(self, masks: Mapping[str, int]) -> dict[str, list[str]]:
        """Decode stored masks into the level names whose bits are set.

        Names the schema no longer defines are dropped. Results are cached
        until the schema changes.
        """
        cached = self._cache.get(masks)
        if cached is not None:
            return cached

        decoded: dict[str, list[str]] = {}
        for name, mask in masks.items():
            defined = self._permissions.get(name)
            if defined is None:
                continue
            decoded[name] = [level for level, bit in defined.items() if bit & int(mask or 0)]

        self._cache.put(masks, decoded)
        return {name: list(levels) for name, levels in decoded.items()}

    def cache_stats(self) -> dict:
        return self._cache.stats()

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self) -> None:
        """Check every name for unknown levels and non-unique or non power-of-two bits.

        Raises:
            SchemaValidationError: On the first problem found
        """
        for name, defined in self._permissions.items():
            seen: dict[int, str] = {}
            for level, bit in defined.items():
                if level not in _KNOWN_LEVELS:
                    self._reject(name, "unknown permission level", level)
                if not isinstance(bit, int) or bit <= 0 or bit & (bit - 1):
                    self._reject(name, f"bit {bit!r} is not a power of two", level)
                if bit in seen:
                    self._reject(name, f"bit {bit} already assigned to {seen[bit]}", level)
                seen[bit] = level

    @staticmethod
    def _reject(name: str, reason: str, level: str) -> None:
        logger.warning("Permission schema rejected for %s:%s: %s", name, level, reason)
        raise SchemaValidationError(name, reason, level)
