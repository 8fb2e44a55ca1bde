# Overview: Service-layer operations for expenditure; encapsulates business logic and database work.

from __future__ import annotations

from ..errors import Conflict, NotFound
from ..extensions import db
from ..models import Expenditure, User
from ..validation import ModelValidationPolicy, enforce_quantity, validate_payload
from . import asset_service, authorization_service
from mams.time_utils import utcnow


CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"asset_id", "quantity", "reason", "expenditure_date"},
    required_on_create={"asset_id", "quantity", "reason"},
)


def get_expenditure(user: User, expenditure_id: int) -> Expenditure:
    expenditure = db.session.get(Expenditure, expenditure_id)
    if not expenditure:
        raise NotFound("Expenditure not found")
    authorization_service.require_base_access(user, expenditure.base)
    return expenditure


def list_expenditures(
    user: User,
    *,
    base: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Expenditure], int]:
    base = authorization_service.resolve_base(user, base)

    query = db.session.query(Expenditure)
    if base:
        query = query.filter(Expenditure.base == base)

    total = query.count()
    rows = (
        query.order_by(Expenditure.expenditure_date.desc(), Expenditure.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return rows, total


def create_expenditure(user: User, payload: dict) -> Expenditure:
    """Write off stock. Only available (unassigned) stock can be expended."""
    patch = validate_payload(model=Expenditure, payload=payload, policy=CREATE_POLICY, partial=False)
    enforce_quantity(patch)

    asset = asset_service.lock_asset(patch["asset_id"])
    authorization_service.require_base_access(user, asset.base)

    if patch["quantity"] > asset.available:
        raise Conflict(
            f"Insufficient available stock: {asset.available} available, "
            f"{patch['quantity']} requested"
        )

    asset.expended = (asset.expended or 0) + patch["quantity"]
    asset.recalculate()

    expenditure = Expenditure(
        asset_id=asset.id,
        base=asset.base,
        quantity=patch["quantity"],
        reason=patch["reason"],
        authorized_by_id=user.id,
        expenditure_date=patch.get("expenditure_date") or utcnow(),
    )
    db.session.add(expenditure)
    db.session.flush()
    return expenditure
