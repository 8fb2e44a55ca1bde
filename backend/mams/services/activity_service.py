# Overview: Service-layer operations for the activity log; best-effort audit writes and reads.

"""
Activity Logger

Append-only audit trail of user actions (create, update, login, logout, ...).

POLICY: Writes are always best-effort. record() runs after the primary
operation has committed, commits on its own, and on a database error rolls
back, logs, and returns None. An audit failure never fails the request that
triggered it.
"""

from __future__ import annotations

from flask import current_app, has_request_context, request
from sqlalchemy.exc import SQLAlchemyError

from ..errors import ValidationError
from ..extensions import db
from ..models import ActivityLog
from ..models.activity import ACTIONS
from mams.time_utils import end_of_day, is_date_only, parse_iso_datetime, utcnow


DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def _client_context(ip_address: str | None, user_agent: str | None) -> tuple[str | None, str | None]:
    if has_request_context():
        ip_address = ip_address or request.remote_addr
        user_agent = user_agent or request.headers.get("User-Agent")
    return ip_address, user_agent


def record(
    actor,
    action: str,
    resource_type: str,
    resource_id: int | None = None,
    details: dict | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    username: str | None = None,
) -> ActivityLog | None:
    """
    Append one activity entry.

    actor is the acting User, or None for anonymous events (failed logins);
    username can then be given explicitly.
    """
    ip_address, user_agent = _client_context(ip_address, user_agent)
    try:
        entry = ActivityLog(
            user_id=actor.id if actor is not None else None,
            username=actor.username if actor is not None else username,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details or {},
            ip_address=ip_address,
            user_agent=user_agent,
            occurred_at=utcnow(),
        )
        db.session.add(entry)
        db.session.commit()
        return entry
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(
            "Failed to record activity %s on %s", action, resource_type
        )
        return None


def _parse_bound(value: str | None, field: str, *, end: bool = False):
    if not value:
        return None
    try:
        parsed = parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 date or datetime")
    if end and is_date_only(value):
        parsed = end_of_day(parsed)
    return parsed


def list_activity(
    *,
    user_id: int | None = None,
    username: str | None = None,
    action: str | None = None,
    resource_type: str | None = None,
    start: str | None = None,
    end: str | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> tuple[list[ActivityLog], int]:
    """Newest-first page of activity entries plus the unpaged total."""
    if action and action not in ACTIONS:
        raise ValidationError(f"action must be one of: {', '.join(ACTIONS)}")
    if limit is None or limit <= 0:
        limit = DEFAULT_PAGE_SIZE
    limit = min(limit, MAX_PAGE_SIZE)
    offset = max(offset or 0, 0)

    query = db.session.query(ActivityLog)
    if user_id is not None:
        query = query.filter(ActivityLog.user_id == user_id)
    if username:
        query = query.filter(ActivityLog.username == username)
    if action:
        query = query.filter(ActivityLog.action == action)
    if resource_type:
        query = query.filter(ActivityLog.resource_type == resource_type)

    start_dt = _parse_bound(start, "startDate")
    end_dt = _parse_bound(end, "endDate", end=True)
    if start_dt:
        query = query.filter(ActivityLog.occurred_at >= start_dt)
    if end_dt:
        query = query.filter(ActivityLog.occurred_at <= end_dt)

    total = query.count()
    rows = (
        query.order_by(ActivityLog.occurred_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return rows, total
