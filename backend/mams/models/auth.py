from __future__ import annotations

from ..extensions import db
from mams.time_utils import to_utc_z, utcnow


ROLE_ADMIN = "Admin"
ROLE_BASE_COMMANDER = "BaseCommander"
ROLE_LOGISTICS_OFFICER = "LogisticsOfficer"

ROLES = (ROLE_ADMIN, ROLE_BASE_COMMANDER, ROLE_LOGISTICS_OFFICER)


class User(db.Model):
    """
    User accounts for authentication and attribution.

    Role is one of ROLES. BaseCommanders are tied to assigned_base; the other
    roles may leave it empty.

    Never hard-deleted: deactivation flips is_active and revokes sessions.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint(
            "role IN ('Admin', 'BaseCommander', 'LogisticsOfficer')",
            name="ck_users_role",
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(64), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    full_name = db.Column(db.String(128), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(32), nullable=False, index=True)
    assigned_base = db.Column(db.String(128), nullable=True, index=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        # Sanitised view: no password hash, no session tokens
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "assigned_base": self.assigned_base,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }

    def to_ref(self) -> dict:
        """Short form embedded in movement records."""
        return {"id": self.id, "username": self.username, "fullName": self.full_name}


class SessionToken(db.Model):
    """
    Session token table, one row per login.

    Tokens are cryptographically secure random strings (32 bytes = 64 hex chars).
    Only the SHA-256 hash is stored; lookups go through the unique index on
    token_hash.

    SECURITY NOTES:
    - Absolute timeout (SESSION_ABSOLUTE_TIMEOUT_HOURS)
    - Idle timeout (SESSION_IDLE_TIMEOUT_HOURS)
    - Revocable on logout, logout-all, password change and deactivation
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_active", "user_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)  # IPv6 max length

    user = db.relationship("User", backref=db.backref("session_tokens", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
            "revoked_at": to_utc_z(self.revoked_at) if self.revoked_at else None,
        }
