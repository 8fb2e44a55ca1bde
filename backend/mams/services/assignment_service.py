# Overview: Service-layer operations for assignment; encapsulates business logic and database work.

"""
Assignments hand stock to personnel or a unit.

Creating one raises the asset's assigned balance (lowering available, not the
closing balance); returning it gives the quantity back.
"""

from __future__ import annotations

from ..errors import Conflict, NotFound, ValidationError
from ..extensions import db
from ..models import Assignment, User
from ..models.movements import (
    ASSIGNMENT_STATUSES,
    ASSIGNMENT_STATUS_ACTIVE,
    ASSIGNMENT_STATUS_RETURNED,
)
from ..validation import ModelValidationPolicy, enforce_quantity, validate_payload
from . import asset_service, authorization_service
from mams.time_utils import utcnow


CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"asset_id", "quantity", "assigned_to", "notes", "start_date"},
    required_on_create={"asset_id", "quantity", "assigned_to"},
)


def get_assignment(user: User, assignment_id: int) -> Assignment:
    assignment = db.session.get(Assignment, assignment_id)
    if not assignment:
        raise NotFound("Assignment not found")
    authorization_service.require_base_access(user, assignment.base)
    return assignment


def list_assignments(
    user: User,
    *,
    base: str | None = None,
    status: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Assignment], int]:
    if status and status not in ASSIGNMENT_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ASSIGNMENT_STATUSES)}")
    base = authorization_service.resolve_base(user, base)

    query = db.session.query(Assignment)
    if base:
        query = query.filter(Assignment.base == base)
    if status:
        query = query.filter(Assignment.status == status)

    total = query.count()
    rows = (
        query.order_by(Assignment.start_date.desc(), Assignment.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return rows, total


def create_assignment(user: User, payload: dict) -> Assignment:
    patch = validate_payload(model=Assignment, payload=payload, policy=CREATE_POLICY, partial=False)
    enforce_quantity(patch)

    asset = asset_service.lock_asset(patch["asset_id"])
    authorization_service.require_base_access(user, asset.base)

    if patch["quantity"] > asset.available:
        raise Conflict(
            f"Insufficient available stock: {asset.available} available, "
            f"{patch['quantity']} requested"
        )

    asset.assigned = (asset.assigned or 0) + patch["quantity"]
    asset.recalculate()

    assignment = Assignment(
        asset_id=asset.id,
        base=asset.base,
        quantity=patch["quantity"],
        assigned_to=patch["assigned_to"],
        status=ASSIGNMENT_STATUS_ACTIVE,
        notes=patch.get("notes"),
        assigned_by_id=user.id,
        start_date=patch.get("start_date") or utcnow(),
    )
    db.session.add(assignment)
    db.session.flush()
    return assignment


def return_assignment(user: User, assignment_id: int) -> Assignment:
    assignment = get_assignment(user, assignment_id)
    if assignment.status != ASSIGNMENT_STATUS_ACTIVE:
        raise Conflict("Assignment has already been returned")

    asset = asset_service.lock_asset(assignment.asset_id)
    asset.assigned = max((asset.assigned or 0) - assignment.quantity, 0)
    asset.recalculate()

    assignment.status = ASSIGNMENT_STATUS_RETURNED
    assignment.end_date = utcnow()

    db.session.flush()
    return assignment
