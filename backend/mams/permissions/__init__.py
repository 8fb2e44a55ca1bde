# Overview: Permission system package.
# Re-exports all public APIs.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    DASHBOARD_PERMISSIONS,
    ASSET_PERMISSIONS,
    TRANSFER_PERMISSIONS,
    PURCHASE_PERMISSIONS,
    ASSIGNMENT_PERMISSIONS,
    EXPENDITURE_PERMISSIONS,
    USER_PERMISSIONS,
    AUDIT_PERMISSIONS,
)
from .helpers import (
    get_all_permission_codes,
    is_known_permission,
)
from .roles import (
    BASE_SCOPED_ROLES,
    DEFAULT_ROLE_PERMISSIONS,
    get_role_permissions,
    roles_with_permission,
)
from .navigation import NAVIGATION, navigation_for_role

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "DASHBOARD_PERMISSIONS",
    "ASSET_PERMISSIONS",
    "TRANSFER_PERMISSIONS",
    "PURCHASE_PERMISSIONS",
    "ASSIGNMENT_PERMISSIONS",
    "EXPENDITURE_PERMISSIONS",
    "USER_PERMISSIONS",
    "AUDIT_PERMISSIONS",
    "BASE_SCOPED_ROLES",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_role_permissions",
    "roles_with_permission",
    "get_all_permission_codes",
    "is_known_permission",
    "NAVIGATION",
    "navigation_for_role",
]
