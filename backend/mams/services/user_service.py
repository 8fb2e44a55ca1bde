# Overview: Service-layer operations for user administration; listing, updates, (de)activation.

from __future__ import annotations

from ..errors import Conflict, NotFound, ValidationError
from ..extensions import db
from ..models import User
from ..models.auth import ROLES
from ..validation import ModelValidationPolicy, validate_payload
from . import session_service
from .auth_service import validate_email, validate_role_and_base


UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"full_name", "email", "role", "assigned_base"},
)


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def get_user_by_username(username: str) -> User:
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        raise NotFound("User not found")
    return user


def list_users(
    *,
    role: str | None = None,
    base: str | None = None,
    include_inactive: bool = False,
) -> list[User]:
    if role and role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")

    query = db.session.query(User)
    if role:
        query = query.filter(User.role == role)
    if base:
        query = query.filter(User.assigned_base == base)
    if not include_inactive:
        query = query.filter(User.is_active.is_(True))

    return query.order_by(User.username.asc()).all()


def update_user(user_id: int, payload: dict) -> tuple[User, dict]:
    """
    Update profile, role and base assignment.

    Returns (user, changes). Flushes; the caller commits.
    """
    user = get_user(user_id)
    patch = validate_payload(model=User, payload=payload, policy=UPDATE_POLICY, partial=True)

    role = patch.get("role", user.role)
    assigned_base = patch.get("assigned_base", user.assigned_base)
    validate_role_and_base(role, assigned_base)

    if "email" in patch and patch["email"] != user.email:
        validate_email(patch["email"])
        taken = db.session.query(User).filter(
            User.email == patch["email"], User.id != user.id
        ).first()
        if taken:
            raise Conflict("Username or email already exists")

    changes = {}
    for key, value in patch.items():
        if getattr(user, key) != value:
            changes[key] = {"from": getattr(user, key), "to": value}
            setattr(user, key, value)

    db.session.flush()
    return user, changes


def deactivate_user(actor: User, user_id: int) -> tuple[User, int]:
    """
    Soft-delete: flip is_active and revoke every session.

    Returns (user, sessions_revoked).
    """
    user = get_user(user_id)
    if user.id == actor.id:
        raise ValidationError("You cannot deactivate your own account")
    if not user.is_active:
        raise Conflict("User is already inactive")

    user.is_active = False
    db.session.commit()

    revoked = session_service.revoke_all_user_sessions(user.id, reason="User account deactivated")
    return user, revoked


def activate_user(user_id: int) -> User:
    user = get_user(user_id)
    if user.is_active:
        raise Conflict("User is already active")
    user.is_active = True
    db.session.commit()
    return user
