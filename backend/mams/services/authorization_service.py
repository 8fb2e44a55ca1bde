# Overview: Service-layer operations for authorization; role checks and base scoping.

"""
Role-Based Authorization and Base Scoping

Fail closed: a role may do only what DEFAULT_ROLE_PERMISSIONS grants it.
check_permission() is the single gate every route goes through (via
@require_permission); denials are written to the activity log.

BASE SCOPING: roles in BASE_SCOPED_ROLES (BaseCommander) only ever see their
assigned base. List views silently narrow to it (resolve_base); single-record
and per-base views reject anything else (require_base_access).
"""

from __future__ import annotations

from flask import current_app, has_request_context, request

from ..errors import Forbidden
from ..models import User
from ..models.activity import ACTION_ACCESS_DENIED
from ..permissions import (
    BASE_SCOPED_ROLES,
    get_role_permissions,
    is_known_permission,
    roles_with_permission,
)
from . import activity_service


NO_BASE_ASSIGNED = "No base assigned to this account"


def _log_denial(user: User | None, reason: str, details: dict | None = None) -> None:
    resource = request.path if has_request_context() else None
    current_app.logger.info(
        "Access denied for %s on %s: %s",
        user.username if user else "anonymous", resource, reason,
    )
    activity_service.record(
        user,
        ACTION_ACCESS_DENIED,
        "Permission",
        details={"reason": reason, "resource": resource, **(details or {})},
    )


def authorize(user: User | None, allowed_roles) -> None:
    """Raise Forbidden unless user.role is one of allowed_roles."""
    if user is None or user.role not in allowed_roles:
        raise Forbidden()


def check_permission(user: User | None, permission_code: str) -> None:
    """
    Require a permission code.

    Resolves the roles granted the code and defers to authorize(). Unknown
    codes are granted to nobody.
    """
    if not is_known_permission(permission_code):
        _log_denial(user, f"Unknown permission {permission_code}", {"permission": permission_code})
        raise Forbidden()
    try:
        authorize(user, roles_with_permission(permission_code))
    except Forbidden:
        _log_denial(user, f"Missing permission {permission_code}", {"permission": permission_code})
        raise


def get_user_permissions(user: User) -> list[str]:
    return sorted(get_role_permissions(user.role))


def user_has_permission(user: User, permission_code: str) -> bool:
    return permission_code in get_role_permissions(user.role)


def is_base_scoped(user: User) -> bool:
    return user.role in BASE_SCOPED_ROLES


def _own_base(user: User) -> str:
    if not user.assigned_base:
        _log_denial(user, NO_BASE_ASSIGNED)
        raise Forbidden(NO_BASE_ASSIGNED)
    return user.assigned_base


def resolve_base(user: User, requested_base: str | None) -> str | None:
    """
    Effective base for a list/aggregate query.

    BaseCommanders are pinned to their own base whatever they ask for; other
    roles get what they asked for (None means every base).
    """
    if is_base_scoped(user):
        return _own_base(user)
    return requested_base or None


def require_base_access(user: User, base: str | None) -> None:
    """Raise Forbidden when a base-scoped user touches another base."""
    if not is_base_scoped(user):
        return
    own = _own_base(user)
    if base != own:
        _log_denial(user, "Base outside assignment", {"base": base})
        raise Forbidden("Access denied to this base")
