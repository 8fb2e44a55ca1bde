# Overview: Flask API routes for user administration; parses input and returns JSON responses.

"""
User administration (Admin only).

Accounts are never hard-deleted: deactivation flips is_active and revokes
every session. New accounts are created through POST /api/auth/register.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..models.activity import ACTION_UPDATE
from ..services import activity_service, session_service, user_service
from ..services.concurrency import commit_unit_of_work
from ..validation import parse_bool_arg


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission("VIEW_USERS")
def list_users_route():
    """
    List users.

    Query params: role, base, includeInactive (default false).
    """
    users = user_service.list_users(
        role=request.args.get("role"),
        base=request.args.get("base"),
        include_inactive=parse_bool_arg(request.args.get("includeInactive")),
    )
    return jsonify({"items": [u.to_dict() for u in users], "count": len(users)}), 200


@users_bp.get("/<int:user_id>")
@require_auth
@require_permission("VIEW_USERS")
def get_user_route(user_id: int):
    user = user_service.get_user(user_id)
    data = user.to_dict()
    data["active_sessions"] = session_service.count_active_sessions(user.id)
    return jsonify(data), 200


@users_bp.put("/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def update_user_route(user_id: int):
    """
    Update a user.

    Request body (all optional): full_name, email, role, assigned_base
    """
    user, changes = commit_unit_of_work(
        user_service.update_user, user_id, request.get_json(silent=True)
    )

    if changes:
        activity_service.record(
            g.current_user,
            ACTION_UPDATE,
            "User",
            resource_id=user.id,
            details={"changes": changes},
        )
    return jsonify(user.to_dict()), 200


@users_bp.post("/<int:user_id>/deactivate")
@require_auth
@require_permission("MANAGE_USERS")
def deactivate_user_route(user_id: int):
    user, revoked = user_service.deactivate_user(g.current_user, user_id)
    activity_service.record(
        g.current_user,
        ACTION_UPDATE,
        "User",
        resource_id=user.id,
        details={"is_active": False, "sessions_revoked": revoked},
    )
    return jsonify({"user": user.to_dict(), "sessions_revoked": revoked}), 200


@users_bp.post("/<int:user_id>/activate")
@require_auth
@require_permission("MANAGE_USERS")
def activate_user_route(user_id: int):
    user = user_service.activate_user(user_id)
    activity_service.record(
        g.current_user,
        ACTION_UPDATE,
        "User",
        resource_id=user.id,
        details={"is_active": True},
    )
    return jsonify({"user": user.to_dict()}), 200
