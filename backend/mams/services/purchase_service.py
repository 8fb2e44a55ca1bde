# Overview: Service-layer operations for purchase; encapsulates business logic and database work.

from __future__ import annotations

from ..errors import Conflict, NotFound, ValidationError
from ..extensions import db
from ..models import Purchase, User
from ..models.movements import (
    PURCHASE_STATUSES,
    PURCHASE_STATUS_APPROVED,
    PURCHASE_STATUS_CANCELLED,
    PURCHASE_STATUS_PENDING,
)
from ..validation import ModelValidationPolicy, enforce_non_negative, enforce_quantity, validate_payload
from . import asset_service, authorization_service
from mams.time_utils import utcnow


CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"asset_id", "quantity", "unit_cost", "supplier", "purchase_date"},
    required_on_create={"asset_id", "quantity"},
)


def get_purchase(user: User, purchase_id: int) -> Purchase:
    purchase = db.session.get(Purchase, purchase_id)
    if not purchase:
        raise NotFound("Purchase not found")
    authorization_service.require_base_access(user, purchase.base)
    return purchase


def list_purchases(
    user: User,
    *,
    base: str | None = None,
    status: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Purchase], int]:
    if status and status not in PURCHASE_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(PURCHASE_STATUSES)}")
    base = authorization_service.resolve_base(user, base)

    query = db.session.query(Purchase)
    if base:
        query = query.filter(Purchase.base == base)
    if status:
        query = query.filter(Purchase.status == status)

    total = query.count()
    rows = (
        query.order_by(Purchase.purchase_date.desc(), Purchase.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return rows, total


def create_purchase(user: User, payload: dict) -> Purchase:
    """Record a purchase request for an asset at its base (status Pending)."""
    patch = validate_payload(model=Purchase, payload=payload, policy=CREATE_POLICY, partial=False)
    enforce_quantity(patch)
    enforce_non_negative(patch, "unit_cost")

    asset = asset_service.get_asset(patch["asset_id"])
    authorization_service.require_base_access(user, asset.base)

    purchase = Purchase(
        asset_id=asset.id,
        base=asset.base,
        quantity=patch["quantity"],
        unit_cost=patch.get("unit_cost"),
        supplier=patch.get("supplier"),
        status=PURCHASE_STATUS_PENDING,
        purchased_by_id=user.id,
        purchase_date=patch.get("purchase_date") or utcnow(),
    )
    db.session.add(purchase)
    db.session.flush()
    return purchase


def _pending_for_user(user: User, purchase_id: int) -> Purchase:
    purchase = get_purchase(user, purchase_id)
    if purchase.status != PURCHASE_STATUS_PENDING:
        raise Conflict(f"Purchase is {purchase.status}; only Pending purchases can change")
    return purchase


def approve_purchase(user: User, purchase_id: int) -> Purchase:
    """Approve a pending purchase; the stock lands on the asset."""
    purchase = _pending_for_user(user, purchase_id)

    asset = asset_service.lock_asset(purchase.asset_id)
    asset.purchases = (asset.purchases or 0) + purchase.quantity
    asset.recalculate()

    purchase.status = PURCHASE_STATUS_APPROVED
    purchase.approved_by_id = user.id

    db.session.flush()
    return purchase


def cancel_purchase(user: User, purchase_id: int) -> Purchase:
    purchase = _pending_for_user(user, purchase_id)
    purchase.status = PURCHASE_STATUS_CANCELLED
    purchase.approved_by_id = user.id
    db.session.flush()
    return purchase
