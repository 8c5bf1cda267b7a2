"""
Bitwise Permissions

Role permission model that stores each permission name's granted levels as
one integer bitmask.

Provides:
- Standard, extended (own/other) and manage-only schema recipes
- Synonym resolution between ``view`` and ``viewown``/``viewother``
- Implication expansion (edit implies view, delete implies edit)
- Grant checks with a ``full`` short-circuit
- Granted/available ratios for role editors

Usage:

    >>> from bitwise_permissions import BundlePermissions, PermissionRegistry
    >>> class LeadPermissions(BundlePermissions):
    ...     name = "lead"
    ...
    ...     def define_permissions(self):
    ...         self.schema.add_extended_permissions(["leads"])
    >>> registry = PermissionRegistry([LeadPermissions()])
    >>> registry.is_granted({"lead": {"leads": 4}}, "lead:leads:viewother")
    True

Configuration:

    # Bundles declared in permissions.yaml
    from bitwise_permissions import PermissionsConfig, load_registry
    registry = load_registry(PermissionsConfig(config_path="permissions.yaml"))
"""

from .bundle import BundlePermissions
from .cache import LevelNameCache
from .config import (
    ConfiguredBundlePermissions,
    PermissionsConfig,
    configure_logging,
    load_registry,
)
from .decisions import AccessDecision, GrantAction
from .evaluator import GrantEvaluator
from .exceptions import (
    BundleNotFoundError,
    InvalidPermissionError,
    PermissionConfigError,
    PermissionsError,
    SchemaValidationError,
)
from .implications import ImplicationExpander
from .levels import LEVEL_BITS, PermissionLevel, SchemaFlavor
from .ratio import RatioCalculator
from .registry import PermissionRegistry
from .schema import PermissionSchema
from .synonyms import SynonymResolver, resolve_level

__all__ = [
    # Model
    "PermissionLevel",
    "SchemaFlavor",
    "LEVEL_BITS",
    "PermissionSchema",
    "LevelNameCache",
    # Evaluation
    "SynonymResolver",
    "resolve_level",
    "ImplicationExpander",
    "GrantEvaluator",
    "RatioCalculator",
    # Bundles
    "BundlePermissions",
    "ConfiguredBundlePermissions",
    "PermissionRegistry",
    "AccessDecision",
    "GrantAction",
    # Configuration
    "PermissionsConfig",
    "load_registry",
    "configure_logging",
    # Exceptions
    "PermissionsError",
    "SchemaValidationError",
    "BundleNotFoundError",
    "InvalidPermissionError",
    "PermissionConfigError",
]

__version__ = "0.1.0"
