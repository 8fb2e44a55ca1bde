# Overview: Unauthenticated liveness and version endpoints.

"""
GET /api/health   database + session table probes; 503 when any probe fails
GET /api/version  API version and environment (nothing secret)
"""

import sys
import time

from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Asset, SessionToken, User
from mams.time_utils import to_utc_z, utcnow


API_VERSION = "1.0.0"

system_bp = Blueprint("system", __name__, url_prefix="/api")


def _timed_probe(name: str, probe) -> dict:
    """Run probe() and wrap its details with status and latency."""
    started = time.perf_counter()
    try:
        details = probe()
        result = {"status": "healthy", "details": details}
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Health probe %s failed", name)
        result = {"status": "unhealthy", "error": f"{name} unavailable"}
    result["latency_ms"] = round((time.perf_counter() - started) * 1000, 2)
    return result


def _database_probe() -> dict:
    return {
        "users": db.session.query(User).count(),
        "assets": db.session.query(Asset).count(),
    }


def _session_probe() -> dict:
    now = utcnow()
    live = db.session.query(SessionToken).filter(SessionToken.is_revoked.is_(False))
    return {
        "active_sessions": live.filter(SessionToken.expires_at >= now).count(),
        "expired_pending_cleanup": live.filter(SessionToken.expires_at < now).count(),
    }


@system_bp.get("/health")
def health():
    started = time.perf_counter()
    checks = {
        "database": _timed_probe("database", _database_probe),
        "session_service": _timed_probe("session_service", _session_probe),
    }
    healthy = all(check["status"] == "healthy" for check in checks.values())

    return {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "checks": checks,
    }, 200 if healthy else 503


@system_bp.get("/version")
def version():
    return {
        "api_version": API_VERSION,
        "environment": current_app.config.get("APP_ENV", "development"),
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
