# Overview: Service-layer operations for transfer; encapsulates business logic and database work.

"""
Inter-base transfer service.

Lifecycle: Pending -> Completed | Cancelled.

Balances only move on completion: the source asset gains transfer_out, the
asset with the same name/type at the destination base (created empty if it
does not exist yet) gains transfer_in. Stock is checked against the source's
available balance both when the transfer is requested and when it completes.

Functions flush but never commit; routes run them through commit_unit_of_work().
"""

from __future__ import annotations

from ..errors import Conflict, NotFound, ValidationError
from ..extensions import db
from ..models import Asset, Transfer, User
from ..models.movements import (
    TRANSFER_STATUSES,
    TRANSFER_STATUS_CANCELLED,
    TRANSFER_STATUS_COMPLETED,
    TRANSFER_STATUS_PENDING,
)
from ..validation import ModelValidationPolicy, enforce_quantity, validate_payload
from . import asset_service, authorization_service
from mams.time_utils import utcnow


CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"asset_id", "to_base", "quantity", "notes"},
    required_on_create={"asset_id", "to_base", "quantity"},
)


def _visible_to(user: User, transfer: Transfer) -> bool:
    if not authorization_service.is_base_scoped(user):
        return True
    base = authorization_service.resolve_base(user, None)
    return base in (transfer.from_base, transfer.to_base)


def get_transfer(user: User, transfer_id: int) -> Transfer:
    transfer = db.session.get(Transfer, transfer_id)
    if not transfer:
        raise NotFound("Transfer not found")
    if not _visible_to(user, transfer):
        authorization_service.require_base_access(user, transfer.from_base)
    return transfer


def list_transfers(
    user: User,
    *,
    base: str | None = None,
    status: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Transfer], int]:
    if status and status not in TRANSFER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(TRANSFER_STATUSES)}")
    base = authorization_service.resolve_base(user, base)

    query = db.session.query(Transfer)
    if base:
        query = query.filter(db.or_(Transfer.from_base == base, Transfer.to_base == base))
    if status:
        query = query.filter(Transfer.status == status)

    total = query.count()
    rows = (
        query.order_by(Transfer.created_at.desc(), Transfer.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return rows, total


def create_transfer(user: User, payload: dict) -> Transfer:
    """Request a transfer out of the asset's base (status Pending)."""
    patch = validate_payload(model=Transfer, payload=payload, policy=CREATE_POLICY, partial=False)
    enforce_quantity(patch)

    asset = asset_service.get_asset(patch["asset_id"])
    authorization_service.require_base_access(user, asset.base)

    if patch["to_base"] == asset.base:
        raise ValidationError("Source and destination bases must differ")

    if patch["quantity"] > asset.available:
        raise Conflict(
            f"Insufficient available stock: {asset.available} available, "
            f"{patch['quantity']} requested"
        )

    transfer = Transfer(
        asset_id=asset.id,
        from_base=asset.base,
        to_base=patch["to_base"],
        quantity=patch["quantity"],
        status=TRANSFER_STATUS_PENDING,
        notes=patch.get("notes"),
        transferred_by_id=user.id,
    )
    db.session.add(transfer)
    db.session.flush()
    return transfer


def _pending_for_user(user: User, transfer_id: int) -> Transfer:
    transfer = get_transfer(user, transfer_id)
    # The destination side can see a transfer but only the source base acts on it
    authorization_service.require_base_access(user, transfer.from_base)
    if transfer.status != TRANSFER_STATUS_PENDING:
        raise Conflict(f"Transfer is {transfer.status}; only Pending transfers can change")
    return transfer


def complete_transfer(user: User, transfer_id: int) -> Transfer:
    """Move the stock and mark the transfer Completed."""
    transfer = _pending_for_user(user, transfer_id)

    source: Asset = asset_service.lock_asset(transfer.asset_id)
    if transfer.quantity > source.available:
        raise Conflict(
            f"Insufficient available stock: {source.available} available, "
            f"{transfer.quantity} requested"
        )

    destination = asset_service.find_or_create_destination(source, transfer.to_base)

    source.transfer_out = (source.transfer_out or 0) + transfer.quantity
    source.recalculate()
    destination.transfer_in = (destination.transfer_in or 0) + transfer.quantity
    destination.recalculate()

    transfer.status = TRANSFER_STATUS_COMPLETED
    transfer.approved_by_id = user.id
    transfer.completed_at = utcnow()

    db.session.flush()
    return transfer


def cancel_transfer(user: User, transfer_id: int) -> Transfer:
    transfer = _pending_for_user(user, transfer_id)
    transfer.status = TRANSFER_STATUS_CANCELLED
    transfer.approved_by_id = user.id
    db.session.flush()
    return transfer
