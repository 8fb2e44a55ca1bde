# Overview: Closed set of API error variants and their HTTP rendering.

"""
API error taxonomy.

Every failure a route can surface is one of the variants below. Services raise
them; the handlers registered by register_error_handlers() turn them into the
JSON error envelope {"error": ..., "code": ...} with the variant's status code.

Authentication failures share one public message so a caller cannot tell an
unknown username from a wrong password or a deactivated account. The specific
reason stays on the exception for the activity log.
"""

from __future__ import annotations

from typing import Any

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db


GENERIC_LOGIN_FAILURE = "Invalid username or password"
GENERIC_FORBIDDEN = "Not authorized"


class ApiError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code = 500
    code = "server_error"

    def __init__(self, message: str | None = None, *, details: Any | None = None):
        self.message = message or self.default_message()
        self.details = details
        super().__init__(self.message)

    @classmethod
    def default_message(cls) -> str:
        return "Internal server error"

    def public_message(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        payload = {"error": self.public_message(), "code": self.code}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(ApiError, ValueError):
    """400-level input problem."""

    status_code = 400
    code = "validation_error"

    @classmethod
    def default_message(cls) -> str:
        return "Invalid request"


class Unauthenticated(ApiError):
    """Missing, invalid, expired or revoked session token."""

    status_code = 401
    code = "unauthenticated"

    @classmethod
    def default_message(cls) -> str:
        return "Authentication required"


class AuthenticationFailed(Unauthenticated):
    """Login rejected. Subclasses record why; the response never does."""

    reason = "Invalid credentials"

    def public_message(self) -> str:
        return GENERIC_LOGIN_FAILURE


class AccountNotFound(AuthenticationFailed):
    reason = "Unknown username"


class InactiveAccount(AuthenticationFailed):
    reason = "Account is deactivated"


class CredentialMismatch(AuthenticationFailed):
    reason = "Password mismatch"


class Forbidden(ApiError):
    """Role or base ownership does not allow the operation."""

    status_code = 403
    code = "forbidden"

    @classmethod
    def default_message(cls) -> str:
        return GENERIC_FORBIDDEN


class NotFound(ApiError):
    status_code = 404
    code = "not_found"

    @classmethod
    def default_message(cls) -> str:
        return "Not found"


class Conflict(ApiError):
    """409-level business rule conflict (e.g., duplicate username, short stock)."""

    status_code = 409
    code = "conflict"

    @classmethod
    def default_message(cls) -> str:
        return "Conflict"


class ServerError(ApiError):
    pass


def error_response(error: ApiError):
    return jsonify(error.to_dict()), error.status_code


def _is_production() -> bool:
    return str(current_app.config.get("APP_ENV", "development")).lower() == "production"


def register_error_handlers(app) -> None:
    """Map error variants (and anything unexpected) to JSON responses."""

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        # The failed unit of work never commits
        db.session.rollback()
        if isinstance(error, ServerError):
            current_app.logger.error("Server error: %s", error.message)
            if _is_production():
                return error_response(ServerError("An unexpected error occurred"))
        return error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        return jsonify({
            "error": error.description or error.name,
            "code": error.name.lower().replace(" ", "_"),
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled exception")
        message = "An unexpected error occurred" if _is_production() else str(error)
        return error_response(ServerError(message))
