# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, g

from .errors import Unauthenticated
from .services import authorization_service, session_service


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user') and hasattr(g, 'session_context')


def bearer_token() -> str | None:
    """Token from the Authorization header, or None."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def require_auth(f):
    """
    Require authentication.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.session_context: The full SessionContext object
    - g.token: The raw bearer token (needed for logout)

    SECURITY: Raises Unauthenticated (401) if:
    - No Authorization header
    - Invalid, expired, idle or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            raise Unauthenticated()

        context = session_service.validate_session(token)
        if not context:
            raise Unauthenticated("Invalid or expired token")

        g.current_user = context.user
        g.session_context = context
        g.token = token

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific permission.

    Must be stacked under @require_auth. Denials are written to the
    activity log by authorization_service.check_permission().
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                raise Unauthenticated()

            authorization_service.check_permission(g.current_user, permission_code)

            return f(*args, **kwargs)

        return decorated_function
    return decorator
