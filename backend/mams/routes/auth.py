# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

SECURITY FEATURES:
- Password strength validation on registration and password change
- Session management with token-based auth
- One generic message for every login failure
- Every login, logout and password change lands in the activity log
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..permissions import navigation_for_role
from ..services import auth_service, authorization_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data


@auth_bp.post("/register")
@require_auth
@require_permission("MANAGE_USERS")
def register_route():
    """
    Create an account (Admin only).

    Request body:
    {
        "username": str,
        "email": str,
        "password": str,
        "full_name": str,
        "role": "Admin" | "BaseCommander" | "LogisticsOfficer",
        "assigned_base": str (required for BaseCommander)
    }

    Returns:
        201: User created
        400: Invalid request / weak password
        409: Username or email taken
    """
    user = auth_service.register_user(g.current_user, _json_body())
    return jsonify({"user": user.to_dict(), "message": "User registered successfully"}), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Returns user info and session token on success.
    Token must be included in Authorization header for protected routes.
    """
    data = _json_body()
    username = data.get("username")
    password = data.get("password")

    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        raise ValidationError("username and password required")

    result = auth_service.login(
        username,
        password,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
    return jsonify(result), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """Revoke the session token used for this request."""
    auth_service.logout(g.session_context, g.token)
    return jsonify({"message": "Logout successful"}), 200


@auth_bp.post("/logout-all")
@require_auth
def logout_all_route():
    """Revoke every session of the current user, on every device."""
    revoked = auth_service.logout_all(g.session_context)
    return jsonify({"message": "Logged out from all devices", "sessions_revoked": revoked}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    """
    Current user with permission codes.

    Frontend uses this to check the token is still valid and to filter
    navigation and buttons by role.
    """
    user = g.current_user
    return jsonify({
        "user": user.to_dict(),
        "permissions": authorization_service.get_user_permissions(user),
        "session": g.session_context.session.to_dict(),
    }), 200


@auth_bp.put("/change-password")
@require_auth
def change_password_route():
    """
    Change the current user's password.

    Request body:
    {
        "current_password": str,
        "new_password": str
    }

    Other sessions are revoked; this one stays valid.
    """
    data = _json_body()
    auth_service.change_password(
        g.session_context,
        data.get("current_password"),
        data.get("new_password"),
    )
    return jsonify({"message": "Password changed successfully"}), 200


@auth_bp.get("/navigation")
@require_auth
def navigation_route():
    """Navigation entries visible to the current user's role."""
    return jsonify({"items": navigation_for_role(g.current_user.role)}), 200
