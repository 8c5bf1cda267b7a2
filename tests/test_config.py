"""Tests for YAML-configured bundles."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from bitwise_permissions import (
    ConfiguredBundlePermissions,
    PermissionConfigError,
    PermissionsConfig,
    configure_logging,
    load_registry,
)
from bitwise_permissions.config import parse_bundles


def write_config(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "permissions.yaml"
    path.write_text(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    return path


SAMPLE = {
    "permissions": {
        "label_prefix": "mautic",
        "bundles": {
            "lead": {
                "extended": {"names": ["leads"], "include_publish": True},
                "standard": {"names": ["imports"], "include_publish": False},
                "manage": ["fields"],
            },
            "category": {"standard": "categories"},
            "plugin": {"standard": ["integrations"], "enabled": False},
        },
    }
}


class TestPermissionsConfig:
    """Environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Unset variables give the defaults."""
        for var in (
            "BITWISE_PERMISSIONS_CONFIG",
            "BITWISE_PERMISSIONS_LABEL_PREFIX",
            "BITWISE_PERMISSIONS_LOG_LEVEL",
        ):
            monkeypatch.delenv(var, raising=False)

        config = PermissionsConfig.from_env()

        assert config.config_path == "permissions.yaml"
        assert config.label_prefix is None
        assert config.log_level == "INFO"

    def test_from_env(self, monkeypatch, tmp_path):
        """Environment variables override the defaults."""
        monkeypatch.setenv("BITWISE_PERMISSIONS_CONFIG", str(tmp_path / "perms.yaml"))
        monkeypatch.setenv("BITWISE_PERMISSIONS_LABEL_PREFIX", "crm")
        monkeypatch.setenv("BITWISE_PERMISSIONS_LOG_LEVEL", "DEBUG")

        config = PermissionsConfig.from_env()

        assert config.config_path == str(tmp_path / "perms.yaml")
        assert config.label_prefix == "crm"
        assert config.log_level == "DEBUG"


class TestLoadRegistry:
    """Building a registry from a file."""

    def test_load(self, tmp_path):
        """Each bundle section becomes a configured bundle."""
        path = write_config(tmp_path, SAMPLE)

        registry = load_registry(PermissionsConfig(config_path=path))

        assert registry.bundles() == ["lead", "category", "plugin"]
        lead = registry.get("lead")
        assert isinstance(lead, ConfiguredBundlePermissions)
        assert lead.get_value("leads", "publishother") == 512
        assert not lead.is_supported("imports", "publish")
        assert lead.get_value("fields", "manage") == 1024
        assert lead.get_label("leads") == "mautic.lead.permissions.leads"

    def test_loaded_bundles_evaluate(self, tmp_path):
        """Configured bundles answer checks through the registry."""
        registry = load_registry(PermissionsConfig(config_path=write_config(tmp_path, SAMPLE)))

        assert registry.is_granted({"lead": {"leads": 4}}, "lead:leads:view")
        assert not registry.is_granted({"lead": {"leads": 4}}, "lead:leads:edit")
        assert not registry.is_granted({"plugin": {"integrations": 1024}}, "plugin:integrations:view")

    def test_label_prefix_override(self, tmp_path):
        """The config object's label prefix wins over the file."""
        path = write_config(tmp_path, SAMPLE)

        registry = load_registry(PermissionsConfig(config_path=path, label_prefix="crm"))

        assert registry.get("category").get_label("categories") == "crm.category.permissions.categories"

    def test_params_passed_to_bundles(self, tmp_path):
        """Application parameters reach every bundle."""
        path = write_config(tmp_path, SAMPLE)

        registry = load_registry(PermissionsConfig(config_path=path), params={"site_url": "x"})

        assert registry.get("lead").params == {"site_url": "x"}

    def test_later_recipe_overwrites(self, tmp_path):
        """A later recipe replaces an earlier one for the same name."""
        data = {
            "permissions": {
                "bundles": {
                    "lead": {"extended": ["leads"], "standard": {"names": "leads", "include_publish": False}}
                }
            }
        }

        registry = load_registry(PermissionsConfig(config_path=write_config(tmp_path, data)))

        assert set(registry.get("lead").schema.levels("leads")) == {"view", "edit", "create", "delete", "full"}

    def test_missing_file(self, tmp_path, caplog):
        """A missing file gives an empty registry."""
        with caplog.at_level(logging.INFO, logger="bitwise_permissions.config"):
            registry = load_registry(PermissionsConfig(config_path=tmp_path / "absent.yaml"))

        assert len(registry) == 0
        assert "No permission config" in caplog.text

    def test_empty_file(self, tmp_path):
        """An empty file gives an empty registry."""
        path = tmp_path / "permissions.yaml"
        path.write_text("")

        assert len(load_registry(PermissionsConfig(config_path=path))) == 0

    def test_invalid_yaml(self, tmp_path):
        """Malformed YAML raises with the file path."""
        path = tmp_path / "permissions.yaml"
        path.write_text("permissions: [unclosed")

        with pytest.raises(PermissionConfigError, match="invalid YAML") as exc_info:
            load_registry(PermissionsConfig(config_path=path))

        assert exc_info.value.path == str(path)

    def test_top_level_not_mapping(self, tmp_path):
        """The document must be a mapping."""
        path = write_config(tmp_path, ["lead"])

        with pytest.raises(PermissionConfigError, match="top level must be a mapping"):
            load_registry(PermissionsConfig(config_path=path))

    def test_bundles_not_mapping(self, tmp_path):
        """The bundles section must be a mapping."""
        path = write_config(tmp_path, {"permissions": {"bundles": ["lead"]}})

        with pytest.raises(PermissionConfigError) as exc_info:
            load_registry(PermissionsConfig(config_path=path))

        assert exc_info.value.field == "bundles"


class TestParseBundles:
    """Structural validation of bundle sections."""

    def test_unknown_key(self):
        """Unknown section keys are rejected with their path."""
        with pytest.raises(PermissionConfigError) as exc_info:
            parse_bundles({"lead": {"custom": ["leads"]}})

        assert exc_info.value.field == "bundles.lead.custom"

    def test_section_not_mapping(self):
        """A bundle section must be a mapping."""
        with pytest.raises(PermissionConfigError, match="expected a mapping"):
            parse_bundles({"lead": ["leads"]})

    def test_names_must_be_strings(self):
        """Recipe names must be strings."""
        with pytest.raises(PermissionConfigError, match="list of names"):
            parse_bundles({"lead": {"standard": [1, 2]}})

    def test_missing_names(self):
        """Recipe mappings need names."""
        with pytest.raises(PermissionConfigError, match="missing 'names'"):
            parse_bundles({"lead": {"extended": {"include_publish": True}}})

    def test_include_publish_must_be_bool(self):
        """include_publish must be a bool."""
        with pytest.raises(PermissionConfigError) as exc_info:
            parse_bundles({"lead": {"standard": {"names": ["leads"], "include_publish": "yes"}}})

        assert exc_info.value.field == "bundles.lead.standard.include_publish"

    def test_include_publish_not_valid_for_manage(self):
        """Manage recipes take no publish flag."""
        with pytest.raises(PermissionConfigError, match="not valid for manage"):
            parse_bundles({"config": {"manage": {"names": ["config"], "include_publish": True}}})

    def test_enabled_must_be_bool(self):
        """enabled must be a bool."""
        with pytest.raises(PermissionConfigError) as exc_info:
            parse_bundles({"lead": {"enabled": "no"}})

        assert exc_info.value.field == "bundles.lead.enabled"

    def test_recipes_keep_order(self):
        """Recipes apply in file order."""
        recipes, enabled = parse_bundles(SAMPLE["permissions"]["bundles"])["lead"]

        assert [recipe.flavor.value for recipe in recipes] == ["extended", "standard", "manage"]
        assert [recipe.include_publish for recipe in recipes] == [True, False, True]
        assert enabled is True


class TestConfigureLogging:
    """Structured logging set up from config."""

    def test_configure_logging(self):
        """The package logger gets one JSON handler at the configured level."""
        logger = configure_logging(PermissionsConfig(log_level="debug"))
        try:
            assert logger.name == "bitwise_permissions"
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1
        finally:
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)
