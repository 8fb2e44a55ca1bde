# Overview: Bearer session tokens; issue, resolve, revoke and purge.

"""
Sessions

A login issues a random 64-hex-char bearer token. Only its SHA-256 digest is
stored (SessionToken.token_hash), so a leaked database cannot be replayed as
credentials.

A session stops resolving when any of these holds:
- it passed expires_at (SESSION_ABSOLUTE_TIMEOUT_HOURS after login)
- it sat unused longer than SESSION_IDLE_TIMEOUT_HOURS
- it was revoked (logout, logout-all, password change, deactivation)
- its user is inactive

Idle and inactive-user sessions are revoked the moment they are seen.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from mams.time_utils import utcnow


DEFAULT_ABSOLUTE_TIMEOUT_HOURS = 24
DEFAULT_IDLE_TIMEOUT_HOURS = 2
TOKEN_BYTES = 32

REASON_IDLE = "Idle timeout"
REASON_DEACTIVATED = "User account deactivated"


@dataclass
class SessionContext:
    """Resolved identity for an authenticated request."""
    user: User
    session: SessionToken


def _hours(key: str, default: int) -> timedelta:
    return timedelta(hours=current_app.config.get(key, default))


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def hash_token(token: str) -> str:
    # Tokens are high-entropy, so an unsalted fast digest is enough
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _live_session(token: str) -> SessionToken | None:
    return (
        db.session.query(SessionToken)
        .filter_by(token_hash=hash_token(token), is_revoked=False)
        .first()
    )


def _revoke(session: SessionToken, reason: str, now=None) -> None:
    session.is_revoked = True
    session.revoked_at = now or utcnow()
    session.revoked_reason = reason


def create_session(
    user: User,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """Persist a new session for user; returns (row, token). Only the row is stored."""
    token = generate_token()
    now = utcnow()

    session = SessionToken(
        user_id=user.id,
        token_hash=hash_token(token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _hours("SESSION_ABSOLUTE_TIMEOUT_HOURS", DEFAULT_ABSOLUTE_TIMEOUT_HOURS),
        user_agent=user_agent,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(session)
    db.session.commit()
    return session, token


def validate_session(token: str) -> SessionContext | None:
    """Resolve a bearer token to its user, or None. Touches last_used_at."""
    if not token:
        return None

    session = _live_session(token)
    if session is None:
        return None

    now = utcnow()
    if session.expires_at < now:
        return None

    idle_limit = _hours("SESSION_IDLE_TIMEOUT_HOURS", DEFAULT_IDLE_TIMEOUT_HOURS)
    user = session.user
    if now - session.last_used_at > idle_limit:
        reason = REASON_IDLE
    elif user is None or not user.is_active:
        reason = REASON_DEACTIVATED
    else:
        reason = None

    if reason:
        _revoke(session, reason, now)
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()
    return SessionContext(user=user, session=session)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    session = _live_session(token)
    if session is None:
        return False
    _revoke(session, reason)
    db.session.commit()
    return True


def revoke_all_user_sessions(
    user_id: int,
    reason: str = "Revoke all sessions",
    except_session_id: int | None = None,
) -> int:
    """Revoke every live session of user_id except except_session_id; returns how many."""
    query = db.session.query(SessionToken).filter_by(user_id=user_id, is_revoked=False)
    if except_session_id is not None:
        query = query.filter(SessionToken.id != except_session_id)

    sessions = query.all()
    now = utcnow()
    for session in sessions:
        _revoke(session, reason, now)
    db.session.commit()
    return len(sessions)


def count_active_sessions(user_id: int) -> int:
    return db.session.query(SessionToken).filter(
        SessionToken.user_id == user_id,
        SessionToken.is_revoked.is_(False),
        SessionToken.expires_at > utcnow(),
    ).count()


def cleanup_expired_sessions(older_than_days: int = 30) -> int:
    """Delete expired or revoked sessions created before the retention window."""
    now = utcnow()
    deleted = (
        db.session.query(SessionToken)
        .filter(
            db.or_(SessionToken.expires_at < now, SessionToken.is_revoked.is_(True)),
            SessionToken.created_at < now - timedelta(days=older_than_days),
        )
        .delete(synchronize_session=False)
    )
    db.session.commit()
    current_app.logger.info("Session cleanup removed %d row(s)", deleted)
    return deleted
