"""
LRU cache for decoded permission masks.

Owned by a single schema instance and cleared whenever that schema
changes, so no decoded result outlives the bit layout it came from.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Mapping
from typing import Any

MaskKey = tuple[tuple[str, int], ...]


class LevelNameCache:
    """
    LRU cache mapping a role's masks to the level names they decode to.

    Features:
    - Least Recently Used eviction policy
    - Configurable max entries
    - Order-independent keying of the mask mapping
    """

    def __init__(self, max_entries: int = 256):
        """
        Initialize level name cache.

        Args:
            max_entries: Maximum number of decoded masks to keep
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")

        self.max_entries = max_entries
        self._cache: OrderedDict[MaskKey, dict[str, list[str]]] = OrderedDict()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(masks: Mapping[str, int]) -> MaskKey:
        """Create a hashable key from a ``name -> mask`` mapping."""
        return tuple(sorted((name, int(mask or 0)) for name, mask in masks.items()))

    def get(self, masks: Mapping[str, int]) -> dict[str, list[str]] | None:
        """
        Get the decoded level names for ``masks`` if cached.

        Returns a copy so callers may mutate the result freely.
        """
        key = self.make_key(masks)

        if key in self._cache:
            self._cache.move_to_end(key)
            self._hits += 1
            return {name: list(levels) for name, levels in self._cache[key].items()}

        self._misses += 1
        return None

    def put(self, masks: Mapping[str, int], decoded: Mapping[str, list[str]]) -> None:
        """Store decoded level names, evicting the least recently used entry when full."""
        key = self.make_key(masks)

        if key in self._cache:
            del self._cache[key]

        self._cache[key] = {name: list(levels) for name, levels in decoded.items()}

        if len(self._cache) > self.max_entries:
            self._cache.popitem(last=False)

    def clear(self) -> None:
        """Drop every cached entry."""
        self._cache.clear()

    def size(self) -> int:
        """Get current number of cached entries."""
        return len(self._cache)

    def stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with cache metrics
        """
        return {
            "size": len(self._cache),
            "max_entries": self.max_entries,
            "hits": self._hits,
            "misses": self._misses,
        }
