"""
YAML configuration for bundle permission schemas.

Configuration file (``permissions.yaml`` by default):

```yaml
permissions:
  label_prefix: mautic
  bundles:
    lead:
      extended:
        names: [leads]
        include_publish: true
      standard:
        names: [imports]
        include_publish: false
      manage: [fields]
    category:
      standard: [categories]
      enabled: true
```

Recipes are applied in the order they appear, so a later recipe
overwrites an earlier one for the same permission name.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .bundle import DEFAULT_LABEL_PREFIX, BundlePermissions
from .exceptions import PermissionConfigError
from .levels import SchemaFlavor
from .logging_utils import configure_structured_logging
from .registry import PermissionRegistry

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("permissions.yaml")


@dataclass
class PermissionsConfig:
    """Configuration for loading bundle schemas."""

    config_path: str | Path = DEFAULT_CONFIG_PATH
    label_prefix: str | None = None  # Falls back to the file, then "app"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> PermissionsConfig:
        """Create config from environment variables."""
        return cls(
            config_path=os.environ.get("BITWISE_PERMISSIONS_CONFIG", str(DEFAULT_CONFIG_PATH)),
            label_prefix=os.environ.get("BITWISE_PERMISSIONS_LABEL_PREFIX"),
            log_level=os.environ.get("BITWISE_PERMISSIONS_LOG_LEVEL", "INFO"),
        )


@dataclass
class RecipeSpec:
    """One recipe application read from a bundle section."""

    flavor: SchemaFlavor
    names: list[str]
    include_publish: bool = True


class ConfiguredBundlePermissions(BundlePermissions):
    """Bundle whose schema comes from configuration instead of a subclass."""

    def __init__(
        self,
        name: str,
        recipes: list[RecipeSpec],
        enabled: bool = True,
        params: Mapping[str, Any] | None = None,
        label_prefix: str = DEFAULT_LABEL_PREFIX,
    ):
        self.name = name
        self._recipes = recipes
        self._enabled = enabled
        super().__init__(params, label_prefix)

    def define_permissions(self) -> None:
        for recipe in self._recipes:
            if recipe.flavor == SchemaFlavor.STANDARD:
                self.schema.add_standard_permissions(recipe.names, recipe.include_publish)
            elif recipe.flavor == SchemaFlavor.EXTENDED:
                self.schema.add_extended_permissions(recipe.names, recipe.include_publish)
            else:
                self.schema.add_manage_permission(recipe.names)
        self.schema.validate()

    def is_enabled(self) -> bool:
        return self._enabled


def _parse_names(value: Any, field: str, path: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise PermissionConfigError(field, "expected a name or a list of names", path)


def _parse_recipe(flavor: SchemaFlavor, value: Any, field: str, path: str) -> RecipeSpec:
    if isinstance(value, Mapping):
        if "names" not in value:
            raise PermissionConfigError(field, "missing 'names'", path)
        include_publish = value.get("include_publish", True)
        if not isinstance(include_publish, bool):
            raise PermissionConfigError(f"{field}.include_publish", "expected a boolean", path)
        if flavor == SchemaFlavor.MANAGE and "include_publish" in value:
            raise PermissionConfigError(f"{field}.include_publish", "not valid for manage", path)
        names = _parse_names(value["names"], f"{field}.names", path)
        return RecipeSpec(flavor, names, include_publish)

    return RecipeSpec(flavor, _parse_names(value, field, path))


def parse_bundles(data: Mapping[str, Any], path: str = "<memory>") -> dict[str, tuple[list[RecipeSpec], bool]]:
    """Validate the ``bundles`` section into recipes per bundle.

    Raises:
        PermissionConfigError: On any structural problem
    """
    bundles: dict[str, tuple[list[RecipeSpec], bool]] = {}
    flavors = {flavor.value: flavor for flavor in SchemaFlavor}

    for bundle_name, section in data.items():
        field = f"bundles.{bundle_name}"
        if not isinstance(section, Mapping):
            raise PermissionConfigError(field, "expected a mapping", path)

        recipes: list[RecipeSpec] = []
        enabled = True
        for key, value in section.items():
            if key == "enabled":
                if not isinstance(value, bool):
                    raise PermissionConfigError(f"{field}.enabled", "expected a boolean", path)
                enabled = value
            elif key in flavors:
                recipes.append(_parse_recipe(flavors[key], value, f"{field}.{key}", path))
            else:
                raise PermissionConfigError(f"{field}.{key}", "unknown key", path)

        bundles[str(bundle_name)] = (recipes, enabled)

    return bundles


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        content = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise PermissionConfigError("permissions", f"invalid YAML: {e}", str(path)) from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise PermissionConfigError("permissions", "top level must be a mapping", str(path))
    return content


def load_registry(
    config: PermissionsConfig | None = None,
    params: Mapping[str, Any] | None = None,
) -> PermissionRegistry:
    """Build a registry from the YAML file named by ``config``.

    A missing file yields an empty registry.

    Raises:
        PermissionConfigError: If the file exists but is malformed
    """
    config = config or PermissionsConfig.from_env()
    path = Path(config.config_path)

    if not path.exists():
        logger.info("No permission config at %s, starting with an empty registry", path)
        return PermissionRegistry()

    section = _load_yaml(path).get("permissions") or {}
    if not isinstance(section, Mapping):
        raise PermissionConfigError("permissions", "expected a mapping", str(path))

    label_prefix = config.label_prefix or section.get("label_prefix") or DEFAULT_LABEL_PREFIX
    bundles_section = section.get("bundles") or {}
    if not isinstance(bundles_section, Mapping):
        raise PermissionConfigError("bundles", "expected a mapping", str(path))

    registry = PermissionRegistry()
    for name, (recipes, enabled) in parse_bundles(bundles_section, str(path)).items():
        registry.register(
            ConfiguredBundlePermissions(name, recipes, enabled, params, label_prefix)
        )

    logger.info("Loaded %d permission bundles from %s", len(registry), path)
    return registry


def configure_logging(config: PermissionsConfig | None = None) -> logging.Logger:
    """Route ``bitwise_permissions`` logs through the structured JSON formatter."""
    config = config or PermissionsConfig.from_env()
    return configure_structured_logging(config.log_level, "bitwise_permissions")
