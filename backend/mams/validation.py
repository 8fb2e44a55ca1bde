# Overview: Request payload and query-string validation driven by model column metadata.

"""
Services never read request JSON directly. Each one declares which columns a
client may write (ModelValidationPolicy) and passes the raw body through
validate_payload(), which returns a clean patch dict or raises
ValidationError (400).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text

from .errors import ValidationError
from mams.time_utils import parse_iso_datetime


# Largest quantity a single movement may carry
MAX_QUANTITY = 1_000_000

INTEGER_PATTERN = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class ModelValidationPolicy:
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)


def _coerce_int(key: str, value: Any) -> int:
    # bool is an int subclass; reject it along with floats and "12.5"/"1e3"
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip()
        if INTEGER_PATTERN.fullmatch(text):
            return int(text)
    raise ValidationError(f"{key} must be an integer")


def _coerce_decimal(key: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{key} must be a number")
    if not number.is_finite():
        raise ValidationError(f"{key} must be a number")
    return number


def _coerce_datetime(key: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_iso_datetime(value)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise ValidationError(f"{key} must be an ISO-8601 datetime")


def _coerce_string(column, value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValidationError(f"{column.key} must be a string")
    text = str(value).strip()
    if not text and not column.nullable:
        raise ValidationError(f"{column.key} cannot be blank")
    length = getattr(column.type, "length", None)
    if length and len(text) > length:
        raise ValidationError(f"{column.key} exceeds max length {length}")
    return text


def _coerce_value(column, value: Any):
    column_type = column.type
    if isinstance(column_type, Integer):
        return _coerce_int(column.key, value)
    if isinstance(column_type, Numeric):
        return _coerce_decimal(column.key, value)
    if isinstance(column_type, Boolean):
        if not isinstance(value, bool):
            raise ValidationError(f"{column.key} must be a boolean")
        return value
    if isinstance(column_type, DateTime):
        return _coerce_datetime(column.key, value)
    if isinstance(column_type, (String, Text)):
        return _coerce_string(column, value)
    return value


def validate_payload(*, model, payload: dict | None, policy: ModelValidationPolicy, partial: bool) -> dict:
    """
    Check a JSON body against policy and the model's columns.

    Unknown or non-writable keys are rejected outright. With partial=False
    every required_on_create field must be present and non-empty; with
    partial=True only the keys given are checked. Values are coerced to the
    column's Python type (int, Decimal, bool, UTC-naive datetime, stripped
    str) and nullability and String length are enforced.
    """
    payload = {} if payload is None else payload
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    columns = {column.key: column for column in model.__mapper__.columns}

    rejected = sorted(key for key in payload if key not in policy.writable_fields or key not in columns)
    if rejected:
        raise ValidationError(f"Field not allowed: {', '.join(rejected)}")

    if not partial:
        missing = sorted(key for key in policy.required_on_create if payload.get(key) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    patch = {}
    for key, raw in payload.items():
        column = columns[key]
        if raw is None:
            if not column.nullable:
                raise ValidationError(f"{key} cannot be null")
            patch[key] = None
        else:
            patch[key] = _coerce_value(column, raw)
    return patch


def enforce_quantity(patch: dict) -> None:
    """Movements carry a strictly positive, bounded quantity."""
    quantity = patch.get("quantity")
    if quantity is None:
        raise ValidationError("quantity is required")
    if quantity <= 0:
        raise ValidationError("quantity must be > 0")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"quantity cannot exceed {MAX_QUANTITY}")


def enforce_non_negative(patch: dict, *fields: str) -> None:
    for field in fields:
        value = patch.get(field)
        if value is not None and value < 0:
            raise ValidationError(f"{field} must be >= 0")


def parse_int_arg(value: str | None, field: str, *, default: int | None = None) -> int | None:
    """Parse an optional integer query-string argument."""
    if value is None or value == "":
        return default
    return _coerce_int(field, value)


def parse_page_args(args, *, default_limit: int = 100, max_limit: int = 500) -> tuple[int, int]:
    """(limit, offset) from query args, clamped to 1..max_limit and >= 0."""
    limit = parse_int_arg(args.get("limit"), "limit", default=default_limit)
    offset = parse_int_arg(args.get("offset"), "offset", default=0)
    return max(1, min(limit, max_limit)), max(offset, 0)


def parse_bool_arg(value: str | None) -> bool:
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")
