from __future__ import annotations

from ..extensions import db
from mams.time_utils import to_utc_z, utcnow


ACTION_CREATE = "Create"
ACTION_UPDATE = "Update"
ACTION_DELETE = "Delete"
ACTION_LOGIN = "Login"
ACTION_LOGOUT = "Logout"
ACTION_FAILED_LOGIN = "Failed Login"
ACTION_ACCESS_DENIED = "Access Denied"

ACTIONS = (
    ACTION_CREATE,
    ACTION_UPDATE,
    ACTION_DELETE,
    ACTION_LOGIN,
    ACTION_LOGOUT,
    ACTION_FAILED_LOGIN,
    ACTION_ACCESS_DENIED,
)


class ActivityLog(db.Model):
    """
    Audit trail of user actions.

    IMMUTABLE: Never update or delete. Append-only for audit integrity.
    user_id is nullable so failed logins for unknown usernames can be recorded.
    """
    __tablename__ = "activity_logs"
    __table_args__ = (
        db.Index("ix_activity_logs_user_action", "user_id", "action"),
        db.Index("ix_activity_logs_resource", "resource_type", "resource_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    username = db.Column(db.String(64), nullable=True, index=True)

    action = db.Column(db.String(32), nullable=False, index=True)
    resource_type = db.Column(db.String(64), nullable=False)
    resource_id = db.Column(db.Integer, nullable=True)
    details = db.Column(db.JSON, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    user = db.relationship("User", backref=db.backref("activity_logs", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "username": self.username,
            "action": self.action,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "details": self.details or {},
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "occurred_at": to_utc_z(self.occurred_at),
        }
