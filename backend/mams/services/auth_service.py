# Overview: Accounts, passwords and the login/logout flows.

"""
Authentication

Passwords are stored as bcrypt hashes (cost BCRYPT_ROUNDS). Neither the
plaintext nor the hash ever reaches a log call or a response body.

Login failures are recorded in the activity log with the concrete reason
(unknown username, inactive account, wrong password); the client only ever
sees "Invalid username or password".
"""

import re

import bcrypt
from flask import current_app

from ..errors import (
    AccountNotFound,
    AuthenticationFailed,
    Conflict,
    CredentialMismatch,
    InactiveAccount,
    ValidationError,
)
from ..extensions import db
from ..models import User
from ..models.activity import (
    ACTION_CREATE,
    ACTION_FAILED_LOGIN,
    ACTION_LOGIN,
    ACTION_LOGOUT,
    ACTION_UPDATE,
)
from ..models.auth import ROLE_BASE_COMMANDER, ROLES
from ..permissions import get_role_permissions
from . import activity_service, session_service
from .session_service import SessionContext
from mams.time_utils import utcnow


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_PASSWORD_LENGTH = 8

# (pattern, what is missing)
PASSWORD_RULES = (
    (re.compile(r"[A-Z]"), "an uppercase letter"),
    (re.compile(r"[a-z]"), "a lowercase letter"),
    (re.compile(r"\d"), "a digit"),
    (re.compile(r"[!@#$%^&*(),.'\":{}|<>]"), "a special character"),
)


class PasswordValidationError(ValidationError):
    pass


def validate_password_strength(password: str) -> None:
    """At least MIN_PASSWORD_LENGTH chars and one match for every PASSWORD_RULES entry."""
    if not isinstance(password, str) or not password:
        raise PasswordValidationError("Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    for pattern, requirement in PASSWORD_RULES:
        if not pattern.search(password):
            raise PasswordValidationError(f"Password must contain {requirement}")


def hash_password(password: str) -> str:
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    # A malformed stored hash never matches
    if not isinstance(password, str) or not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _clean_str(data: dict, field: str, *, required: bool = True, max_length: int | None = None) -> str | None:
    value = data.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    value = value.strip()
    if max_length and len(value) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return value


def validate_role_and_base(role: str | None, assigned_base: str | None) -> None:
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
    if role == ROLE_BASE_COMMANDER and not assigned_base:
        raise ValidationError("assigned_base is required for BaseCommander")


def validate_email(email: str) -> None:
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("email is not a valid address")


def create_user(
    username: str,
    email: str,
    password: str,
    full_name: str,
    role: str,
    assigned_base: str | None = None,
) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises:
        ValidationError: bad role, missing base for a BaseCommander, bad email
        PasswordValidationError: If password doesn't meet requirements
        Conflict: If username or email is taken
    """
    validate_role_and_base(role, assigned_base)
    validate_email(email)

    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()

    if existing:
        raise Conflict("Username or email already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        role=role,
        assigned_base=assigned_base,
        is_active=True,
    )

    db.session.add(user)
    db.session.commit()
    return user


def register_user(actor: User, data: dict) -> User:
    """Admin registration of a new account; records a Create activity entry."""
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")

    user = create_user(
        username=_clean_str(data, "username", max_length=64),
        email=_clean_str(data, "email", max_length=255),
        password=data.get("password"),
        full_name=_clean_str(data, "full_name", max_length=128),
        role=_clean_str(data, "role"),
        assigned_base=_clean_str(data, "assigned_base", required=False, max_length=128),
    )

    activity_service.record(
        actor,
        ACTION_CREATE,
        "User",
        resource_id=user.id,
        details={
            "created_user": user.username,
            "role": user.role,
            "assigned_base": user.assigned_base,
        },
    )
    return user


def authenticate(username: str, password: str) -> User:
    """
    Check credentials and return the User.

    Raises AccountNotFound, InactiveAccount or CredentialMismatch; all of them
    render as the same 401 response.
    """
    user = db.session.query(User).filter_by(username=username).first()

    if not user:
        raise AccountNotFound()

    if not user.is_active:
        raise InactiveAccount()

    if not verify_password(password, user.password_hash):
        raise CredentialMismatch()

    return user


def login(
    username: str,
    password: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> dict:
    """
    Authenticate, issue a session token and audit the attempt.

    Returns {"user", "permissions", "token", "session", "message"}; the user
    is sanitised.
    """
    try:
        user = authenticate(username, password)
    except AuthenticationFailed as exc:
        current_app.logger.info("Login failed for user %s: %s", username, exc.reason)
        activity_service.record(
            None,
            ACTION_FAILED_LOGIN,
            "User",
            details={"reason": exc.reason},
            ip_address=ip_address,
            user_agent=user_agent,
            username=username,
        )
        raise

    user.last_login_at = utcnow()
    session, token = session_service.create_session(
        user,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    current_app.logger.info("User %s logged in", user.username)

    activity_service.record(
        user,
        ACTION_LOGIN,
        "User",
        resource_id=user.id,
        details={"role": user.role, "assigned_base": user.assigned_base},
        ip_address=ip_address,
        user_agent=user_agent,
    )

    return {
        "user": user.to_dict(),
        "permissions": sorted(get_role_permissions(user.role)),
        "token": token,
        "session": session.to_dict(),
        "message": "Login successful",
    }


def logout(context: SessionContext, token: str) -> None:
    """Revoke the caller's current session only."""
    user = context.user
    session_service.revoke_session(token, reason="User logout")
    current_app.logger.info("User %s logged out", user.username)
    activity_service.record(
        user,
        ACTION_LOGOUT,
        "User",
        resource_id=user.id,
        details={"role": user.role, "assigned_base": user.assigned_base},
    )


def logout_all(context: SessionContext) -> int:
    """Revoke every live session of the caller, including the current one."""
    user = context.user
    revoked = session_service.revoke_all_user_sessions(user.id, reason="Logout all devices")
    current_app.logger.info("User %s logged out of %d sessions", user.username, revoked)
    activity_service.record(
        user,
        ACTION_LOGOUT,
        "User",
        resource_id=user.id,
        details={
            "all_devices": True,
            "sessions_revoked": revoked,
            "role": user.role,
            "assigned_base": user.assigned_base,
        },
    )
    return revoked


def change_password(context: SessionContext, current_password: str, new_password: str) -> None:
    """
    Replace the caller's password.

    The current password must verify. Other sessions are revoked; the one
    making the request stays valid.
    """
    if not isinstance(current_password, str) or not isinstance(new_password, str) \
            or not current_password or not new_password:
        raise ValidationError("current_password and new_password are required")

    user = context.user
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    if verify_password(new_password, user.password_hash):
        raise ValidationError("New password must differ from the current password")

    user.password_hash = hash_password(new_password)
    db.session.commit()

    session_service.revoke_all_user_sessions(
        user.id,
        reason="Password changed",
        except_session_id=context.session.id,
    )

    activity_service.record(
        user,
        ACTION_UPDATE,
        "User",
        resource_id=user.id,
        details={"password_changed": True},
    )
