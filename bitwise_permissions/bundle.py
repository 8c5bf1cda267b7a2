"""
Base class for a bundle's permission set.

Subclasses name the bundle and populate the schema in
:meth:`BundlePermissions.define_permissions`::

    class LeadPermissions(BundlePermissions):
        name = "lead"

        def define_permissions(self) -> None:
            self.schema.add_extended_permissions(["leads"])
            self.schema.add_standard_permissions(["imports"], include_publish=False)
            self.schema.add_manage_permission(["fields"])
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .evaluator import GrantEvaluator
from .implications import ImplicationExpander, RequestedLevels
from .levels import CATEGORIES, CHOICE_ORDER
from .logging_utils import BundleLoggerAdapter, get_permissions_logger
from .ratio import RatioCalculator
from .schema import PermissionSchema

DEFAULT_LABEL_PREFIX = "app"

PermissionRows = Mapping[str, Iterable[Mapping[str, Any]]]


class BundlePermissions:
    """Permission schema and evaluators for one bundle."""

    name: str = ""

    def __init__(
        self,
        params: Mapping[str, Any] | None = None,
        label_prefix: str = DEFAULT_LABEL_PREFIX,
    ):
        """Build the bundle's schema.

        Args:
            params: Application parameters available to ``define_permissions``
                and ``is_enabled``
            label_prefix: First segment of translation keys from ``get_label``
        """
        if not self.name:
            raise TypeError(f"{type(self).__name__} must set a bundle name")

        self.params: dict[str, Any] = dict(params or {})
        self.label_prefix = label_prefix
        self.schema = PermissionSchema()
        self.log = BundleLoggerAdapter(get_permissions_logger("bundle"), {"bundle": self.name})

        self.define_permissions()

        self.evaluator = GrantEvaluator(self.schema)
        self.expander = ImplicationExpander(self.schema)
        self.ratio_calculator = RatioCalculator(self.schema)

    def define_permissions(self) -> None:
        """Populate ``self.schema``. Override in subclasses."""

    def is_enabled(self) -> bool:
        """Whether the bundle's permissions are active (e.g. the bundle is installed)."""
        return True

    def get_permissions(self) -> dict[str, dict[str, int]]:
        return self.schema.as_dict()

    def is_supported(self, name: str, level: str = "") -> bool:
        return self.schema.is_supported(name, level)

    def get_value(self, name: str, level: str) -> int:
        return self.schema.get_value(name, level)

    def is_granted(self, granted: Mapping[str, int], name: str, level: str) -> bool:
        """Check ``name:level`` against the role's masks for this bundle."""
        if not self.is_enabled():
            self.log.debug("Bundle disabled, denying %s:%s", name, level)
            return False
        return self.evaluator.is_granted(granted, name, level)

    def analyze_permissions(
        self,
        requested: RequestedLevels,
        all_requested: Mapping[str, RequestedLevels] | None = None,
        is_second_round: bool = False,
    ) -> bool:
        """Expand ``requested`` with implied levels; return whether a second round is needed."""
        return self.expander.expand(requested, all_requested, is_second_round)

    def get_permission_ratio(self, granted: Mapping[str, Iterable[str]]) -> tuple[int, int]:
        return self.ratio_calculator.ratio(granted)

    def convert_bits_to_permission_names(self, rows: PermissionRows) -> dict[str, list[str]]:
        """Decode persisted rows into level names for this bundle.

        Args:
            rows: Bundle -> list of ``{"name": ..., "bitwise": ...}`` rows as
                loaded for a role

        Returns:
            Permission name -> granted level names. Names the bundle no
            longer supports are dropped.
        """
        if not self.is_enabled():
            return {}

        masks: dict[str, int] = {}
        for row in rows.get(self.name, ()):
            name = row["name"]
            masks[name] = masks.get(name, 0) | int(row["bitwise"] or 0)

        return self.schema.bits_to_levels(masks)

    def get_label(self, name: str) -> str:
        """Return the translation key for a permission name's list."""
        if name == CATEGORIES:
            return f"{self.label_prefix}.category.permissions.categories"
        return f"{self.label_prefix}.{self.name}.permissions.{name}"

    def get_choices(self, name: str) -> list[tuple[str, str]]:
        """Return ``(label key, level)`` pairs for a permission name in editor order.

        Levels outside the known vocabulary keep their definition order at the end.
        """
        defined = self.schema.levels(name) or {}
        levels = [level for level in CHOICE_ORDER if level in defined]
        levels += [level for level in defined if level not in CHOICE_ORDER]
        return [(f"{self.label_prefix}.core.permissions.{level}", level) for level in levels]

    def parse_for_javascript(self, perms: dict[str, Any]) -> None:
        """Adjust how a client computes granted permissions. No-op by default."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, permissions={self.schema.names()!r})"
