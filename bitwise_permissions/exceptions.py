"""
Custom exceptions for bitwise permissions.

Permission checks never raise; these cover programming and
configuration errors surfaced at startup or on explicit lookups.
"""


class PermissionsError(Exception):
    """Base exception for all permission model errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SchemaValidationError(PermissionsError):
    """Raised when a schema assigns colliding or malformed bits."""

    def __init__(self, name: str, reason: str, level: str | None = None):
        details = {"name": name, "reason": reason}
        if level:
            details["level"] = level
        message = f"Invalid permission schema for {name}"
        if level:
            message += f":{level}"
        super().__init__(f"{message}: {reason}", details)
        self.name = name
        self.reason = reason
        self.level = level


class BundleNotFoundError(PermissionsError):
    """Raised when a bundle is not registered."""

    def __init__(self, bundle: str):
        super().__init__(f"Permission bundle not registered: {bundle}", {"bundle": bundle})
        self.bundle = bundle


class InvalidPermissionError(PermissionsError):
    """Raised when a ``bundle:name:level`` string cannot be parsed."""

    def __init__(self, permission: str, reason: str):
        super().__init__(
            f"Invalid permission '{permission}': {reason}",
            {"permission": permission, "reason": reason},
        )
        self.permission = permission
        self.reason = reason


class PermissionConfigError(PermissionsError):
    """Raised when permission configuration is malformed."""

    def __init__(self, field: str, reason: str, path: str | None = None):
        details = {"field": field, "reason": reason}
        if path:
            details["path"] = path
        message = f"Invalid permission config for {field}: {reason}"
        if path:
            message += f" ({path})"
        super().__init__(message, details)
        self.field = field
        self.reason = reason
        self.path = path
