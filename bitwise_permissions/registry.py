"""
Registry of bundle permission sets.

Built once at startup and read-only afterwards. Permissions are addressed
as ``bundle:name:level`` strings (e.g. ``lead:leads:viewown``) and a role's
stored masks as ``{bundle: {name: mask}}``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from .bundle import BundlePermissions, PermissionRows
from .decisions import AccessDecision, GrantAction
from .exceptions import BundleNotFoundError, InvalidPermissionError
from .implications import RequestedLevels
from .logging_utils import get_permissions_logger

logger = get_permissions_logger("registry")

RoleMasks = Mapping[str, Mapping[str, int]]

_COMBINERS = {
    GrantAction.MATCH_ALL: all,
    GrantAction.MATCH_ONE: any,
}


class PermissionRegistry:
    """Bundle permission sets keyed by bundle identifier."""

    def __init__(self, bundles: Iterable[BundlePermissions] = ()):
        self._bundles: dict[str, BundlePermissions] = {}
        for bundle in bundles:
            self.register(bundle)

    def register(self, bundle: BundlePermissions) -> None:
        """Add a bundle, replacing any bundle registered under the same name."""
        if bundle.name in self._bundles:
            logger.warning("Replacing registered permission bundle %s", bundle.name)
        self._bundles[bundle.name] = bundle
        logger.debug(
            "Registered permission bundle %s", bundle.name, extra={"bundle": bundle.name}
        )

    def get(self, bundle: str) -> BundlePermissions:
        """Return the registered bundle.

        Raises:
            BundleNotFoundError: If no bundle is registered under that name
        """
        try:
            return self._bundles[bundle]
        except KeyError:
            raise BundleNotFoundError(bundle) from None

    def bundles(self) -> list[str]:
        return list(self._bundles)

    def __contains__(self, bundle: object) -> bool:
        return bundle in self._bundles

    def __iter__(self) -> Iterator[BundlePermissions]:
        return iter(self._bundles.values())

    def __len__(self) -> int:
        return len(self._bundles)

    # =========================================================================
    # Checks
    # =========================================================================

    @staticmethod
    def parse_permission(permission: str) -> tuple[str, str, str]:
        """Split ``bundle:name:level``.

        Raises:
            InvalidPermissionError: Unless there are exactly three non-empty parts
        """
        parts = permission.split(":")
        if len(parts) != 3:
            raise InvalidPermissionError(permission, "expected bundle:name:level")
        if not all(parts):
            raise InvalidPermissionError(permission, "empty segment")
        bundle, name, level = parts
        return bundle, name, level

    def check(self, role_masks: RoleMasks, permission: str) -> AccessDecision:
        """Check one permission string and explain the outcome.

        Unknown bundles and unsupported permissions are denied, never raised.
        Malformed permission strings still raise InvalidPermissionError.
        """
        bundle_name, name, level = self.parse_permission(permission)

        bundle = self._bundles.get(bundle_name)
        if bundle is None:
            return self._deny(permission, "bundle_not_registered")
        if not bundle.is_enabled():
            return self._deny(permission, "bundle_disabled")
        if not bundle.is_supported(name, level):
            return self._deny(permission, "unsupported_permission")

        _, resolved = bundle.schema.resolve(name, level)
        granted = role_masks.get(bundle_name) or {}
        mask = granted.get(name)
        if mask is None:
            return self._deny(permission, "no_grant", resolved)

        if bundle.schema.full_bit(name) & int(mask):
            return AccessDecision(True, "full_access", permission, resolved)
        if bundle.is_granted(granted, name, level):
            return AccessDecision(True, "granted", permission, resolved)
        return self._deny(permission, "insufficient_permission", resolved)

    @staticmethod
    def _deny(permission: str, reason: str, level: str | None = None) -> AccessDecision:
        logger.debug(
            "Denied %s: %s",
            permission,
            reason,
            extra={
                "bundle": permission.split(":", 1)[0],
                "permission": permission,
                "level": level,
                "reason": reason,
                "allowed": False,
            },
        )
        return AccessDecision(False, reason, permission, level)

    def is_granted(self, role_masks: RoleMasks, permission: str) -> bool:
        return self.check(role_masks, permission).allowed

    def evaluate(
        self,
        role_masks: RoleMasks,
        permissions: Iterable[str],
        action: GrantAction = GrantAction.MATCH_ALL,
    ) -> bool | dict[str, bool]:
        """Check several permissions at once.

        Returns:
            For MATCH_ALL / MATCH_ONE a single bool (False for an empty
            list); for RETURN_ARRAY a permission -> bool mapping
        """
        results = {permission: self.is_granted(role_masks, permission) for permission in permissions}

        if action == GrantAction.RETURN_ARRAY:
            return results
        if not results:
            return False
        return _COMBINERS[action](results.values())

    # =========================================================================
    # Role editing
    # =========================================================================

    def analyze(self, requested: dict[str, RequestedLevels]) -> None:
        """Expand every bundle's selection in place, running a second round where asked."""
        second_round: list[str] = []

        for bundle_name in list(requested):
            bundle = self._bundles.get(bundle_name)
            if bundle is None:
                logger.debug("Skipping selection for unregistered bundle %s", bundle_name)
                continue
            if bundle.analyze_permissions(requested[bundle_name], requested):
                second_round.append(bundle_name)

        for bundle_name in second_round:
            self._bundles[bundle_name].analyze_permissions(
                requested[bundle_name], requested, is_second_round=True
            )

    def to_bitmasks(self, requested: Mapping[str, RequestedLevels]) -> dict[str, dict[str, int]]:
        """Turn selections into the integer masks a persistence layer stores."""
        masks: dict[str, dict[str, int]] = {}
        for bundle_name, levels in requested.items():
            bundle = self._bundles.get(bundle_name)
            if bundle is None:
                logger.debug("Dropping selection for unregistered bundle %s", bundle_name)
                continue
            masks[bundle_name] = bundle.schema.to_bitmask(levels)
        return masks

    def bits_to_levels(self, rows: PermissionRows) -> dict[str, dict[str, list[str]]]:
        """Decode persisted rows for every registered bundle present in ``rows``."""
        return {
            bundle.name: bundle.convert_bits_to_permission_names(rows)
            for bundle in self
            if bundle.name in rows
        }

    def ratio(self, levels_by_bundle: Mapping[str, Mapping[str, Iterable[str]]]) -> tuple[int, int]:
        """Sum granted/available counts over every enabled bundle."""
        total_granted = 0
        total_available = 0
        for bundle in self:
            if not bundle.is_enabled():
                continue
            granted, available = bundle.get_permission_ratio(levels_by_bundle.get(bundle.name, {}))
            total_granted += granted
            total_available += available
        return total_granted, total_available
