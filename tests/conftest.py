"""
Shared test configuration and fixtures.

Provides a small set of bundles shaped like a CRM install: contacts with
own/other levels, a standard-only email bundle with categories, and a
config-only bundle with a single manage bit.
"""

import pytest

from bitwise_permissions import BundlePermissions, PermissionRegistry, PermissionSchema


class LeadPermissions(BundlePermissions):
    """Contacts bundle with split own/other levels."""

    name = "lead"

    def define_permissions(self) -> None:
        self.schema.add_extended_permissions(["leads"])
        self.schema.add_standard_permissions(["imports"], include_publish=False)
        self.schema.add_manage_permission(["fields"])


class EmailPermissions(BundlePermissions):
    """Email bundle whose categories are granted along with any view access."""

    name = "email"

    def define_permissions(self) -> None:
        self.schema.add_standard_permissions(["categories"])
        self.schema.add_extended_permissions(["emails"])


class ConfigPermissions(BundlePermissions):
    """Config-only bundle."""

    name = "config"

    def define_permissions(self) -> None:
        self.schema.add_manage_permission("config")


class DisabledPermissions(BundlePermissions):
    """Bundle for an uninstalled plugin."""

    name = "plugin"

    def define_permissions(self) -> None:
        self.schema.add_standard_permissions("integrations")

    def is_enabled(self) -> bool:
        return False


@pytest.fixture
def standard_schema() -> PermissionSchema:
    schema = PermissionSchema()
    schema.add_standard_permissions(["pages"])
    return schema


@pytest.fixture
def extended_schema() -> PermissionSchema:
    schema = PermissionSchema()
    schema.add_extended_permissions(["leads"], include_publish=True)
    return schema


@pytest.fixture
def lead_bundle() -> LeadPermissions:
    return LeadPermissions()


@pytest.fixture
def email_bundle() -> EmailPermissions:
    return EmailPermissions()


@pytest.fixture
def registry() -> PermissionRegistry:
    return PermissionRegistry(
        [LeadPermissions(), EmailPermissions(), ConfigPermissions(), DisabledPermissions()]
    )


@pytest.fixture
def disabled_bundle() -> DisabledPermissions:
    return DisabledPermissions()
