"""
Permission level vocabulary and the static tables built on it.

Bits are shared across schema flavors so that a mask stored while a
permission name used the standard set stays meaningful after it moves to
the extended set (``view`` and ``viewother`` are both 4).
"""

from __future__ import annotations

from enum import Enum


class PermissionLevel(str, Enum):
    """Every level a bundle schema may define."""

    VIEW = "view"
    VIEWOWN = "viewown"
    VIEWOTHER = "viewother"
    EDIT = "edit"
    EDITOWN = "editown"
    EDITOTHER = "editother"
    CREATE = "create"
    DELETE = "delete"
    DELETEOWN = "deleteown"
    DELETEOTHER = "deleteother"
    PUBLISH = "publish"
    PUBLISHOWN = "publishown"
    PUBLISHOTHER = "publishother"
    FULL = "full"
    MANAGE = "manage"


_L = PermissionLevel

LEVEL_BITS: dict[PermissionLevel, int] = {
    _L.VIEWOWN: 2,
    _L.VIEW: 4,
    _L.VIEWOTHER: 4,
    _L.EDITOWN: 8,
    _L.EDIT: 16,
    _L.EDITOTHER: 16,
    _L.CREATE: 32,
    _L.DELETEOWN: 64,
    _L.DELETE: 128,
    _L.DELETEOTHER: 128,
    _L.PUBLISHOWN: 256,
    _L.PUBLISH: 512,
    _L.PUBLISHOTHER: 512,
    _L.FULL: 1024,
    _L.MANAGE: 1024,
}

# Installation order follows the stored layout; see CHOICE_ORDER for display.
STANDARD_LEVELS: tuple[PermissionLevel, ...] = (_L.VIEW, _L.EDIT, _L.CREATE, _L.DELETE, _L.FULL)
STANDARD_PUBLISH_LEVELS: tuple[PermissionLevel, ...] = (_L.PUBLISH,)

EXTENDED_LEVELS: tuple[PermissionLevel, ...] = (
    _L.VIEWOWN,
    _L.VIEWOTHER,
    _L.EDITOWN,
    _L.EDITOTHER,
    _L.CREATE,
    _L.DELETEOWN,
    _L.DELETEOTHER,
    _L.FULL,
)
EXTENDED_PUBLISH_LEVELS: tuple[PermissionLevel, ...] = (_L.PUBLISHOWN, _L.PUBLISHOTHER)

MANAGE_LEVELS: tuple[PermissionLevel, ...] = (_L.MANAGE,)


class SchemaFlavor(Enum):
    """Recipes a permission name can be installed with."""

    STANDARD = "standard"
    EXTENDED = "extended"
    MANAGE = "manage"


def flavor_levels(flavor: SchemaFlavor, include_publish: bool = True) -> dict[str, int]:
    """Return the ``level -> bit`` mapping a recipe installs."""
    if flavor == SchemaFlavor.STANDARD:
        levels = STANDARD_LEVELS + (STANDARD_PUBLISH_LEVELS if include_publish else ())
    elif flavor == SchemaFlavor.EXTENDED:
        levels = EXTENDED_LEVELS + (EXTENDED_PUBLISH_LEVELS if include_publish else ())
    else:
        levels = MANAGE_LEVELS
    return {level.value: LEVEL_BITS[level] for level in levels}


# =============================================================================
# Synonyms
# =============================================================================

# Split level -> collapsed level it maps to when the collapsed one is defined.
COLLAPSED_SYNONYMS: dict[str, str] = {
    "viewown": "view",
    "viewother": "view",
    "editown": "edit",
    "editother": "edit",
    "deleteown": "delete",
    "deleteother": "delete",
    "publishown": "publish",
    "publishother": "publish",
}

# Collapsed level -> split level it maps to when only the split ones exist.
SPLIT_SYNONYMS: dict[str, str] = {
    "view": "viewown",
    "edit": "editown",
    "delete": "deleteown",
    "publish": "publishown",
}

# Collapsed level -> both halves of its split form.
SPLIT_PAIRS: dict[str, tuple[str, str]] = {
    "view": ("viewown", "viewother"),
    "edit": ("editown", "editother"),
    "delete": ("deleteown", "deleteother"),
    "publish": ("publishown", "publishother"),
}


# =============================================================================
# Implications
# =============================================================================

IMPLIED_LEVELS: dict[str, tuple[str, ...]] = {
    "edit": ("viewother", "viewown"),
    "editother": ("viewother", "viewown"),
    "delete": ("editother", "viewother", "viewown"),
    "deleteother": ("editother", "viewother", "viewown"),
    "publish": ("viewother", "viewown"),
    "publishother": ("viewother", "viewown"),
    "viewother": ("viewown",),
    "editown": ("viewown",),
    "deleteown": ("viewown",),
    "publishown": ("viewown",),
    "create": ("viewown",),
}

# Levels that count as "has view access" for the categories rule.
VIEW_ACCESS_LEVELS: frozenset[str] = frozenset({"view", "viewown"})

CATEGORIES = "categories"

# Order levels are offered in role editors. Standard names list publish
# before full; extended names list full before the publish pair.
CHOICE_ORDER: tuple[str, ...] = (
    "view",
    "viewown",
    "viewother",
    "edit",
    "editown",
    "editother",
    "create",
    "delete",
    "deleteown",
    "deleteother",
    "publish",
    "full",
    "publishown",
    "publishother",
    "manage",
)
