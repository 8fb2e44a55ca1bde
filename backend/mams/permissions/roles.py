# Overview: Role -> permission grants. Anything not listed here is denied.

from mams.models.auth import ROLE_ADMIN, ROLE_BASE_COMMANDER, ROLE_LOGISTICS_OFFICER

from .helpers import get_all_permission_codes


# Roles whose data access is confined to User.assigned_base.
# LogisticsOfficer works across bases.
BASE_SCOPED_ROLES = frozenset({ROLE_BASE_COMMANDER})


DEFAULT_ROLE_PERMISSIONS = {
    ROLE_ADMIN: frozenset(get_all_permission_codes()),
    ROLE_BASE_COMMANDER: frozenset({
        "VIEW_DASHBOARD",
        "VIEW_ASSETS",
        "VIEW_TRANSFERS",
        "CREATE_TRANSFERS",
        "APPROVE_TRANSFERS",
        "VIEW_PURCHASES",
        "CREATE_PURCHASES",
        "APPROVE_PURCHASES",
        "VIEW_ASSIGNMENTS",
        "MANAGE_ASSIGNMENTS",
        "VIEW_EXPENDITURES",
        "CREATE_EXPENDITURES",
    }),
    ROLE_LOGISTICS_OFFICER: frozenset({
        "VIEW_DASHBOARD",
        "VIEW_ASSETS",
        "CREATE_ASSETS",
        "VIEW_TRANSFERS",
        "CREATE_TRANSFERS",
        "VIEW_PURCHASES",
        "CREATE_PURCHASES",
    }),
}


def get_role_permissions(role: str) -> frozenset[str]:
    return DEFAULT_ROLE_PERMISSIONS.get(role, frozenset())


def roles_with_permission(code: str) -> frozenset[str]:
    """All roles granted a permission code."""
    return frozenset(
        role for role, codes in DEFAULT_ROLE_PERMISSIONS.items() if code in codes
    )
