# Overview: Service-layer operations for assets; encapsulates business logic and database work.

from __future__ import annotations

from ..errors import Conflict, NotFound
from ..extensions import db
from ..models import Asset, User
from ..validation import ModelValidationPolicy, enforce_non_negative, validate_payload
from . import authorization_service
from .concurrency import lock_for_update


CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "type", "base", "description", "opening_balance"},
    required_on_create={"name", "type", "base"},
)

# Balances are never writable here; they move only through movements
UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "type", "description"},
)


def get_asset(asset_id: int) -> Asset:
    asset = db.session.get(Asset, asset_id)
    if not asset:
        raise NotFound("Asset not found")
    return asset


def get_asset_for_user(user: User, asset_id: int) -> Asset:
    asset = get_asset(asset_id)
    authorization_service.require_base_access(user, asset.base)
    return asset


def lock_asset(asset_id: int) -> Asset:
    """Load an asset row for a balance change."""
    asset = lock_for_update(db.session.query(Asset).filter_by(id=asset_id)).first()
    if not asset:
        raise NotFound("Asset not found")
    return asset


def find_asset(name: str, asset_type: str, base: str) -> Asset | None:
    return db.session.query(Asset).filter_by(name=name, type=asset_type, base=base).first()


def _ensure_unique(name: str, asset_type: str, base: str, exclude_id: int | None = None) -> None:
    existing = find_asset(name, asset_type, base)
    if existing and existing.id != exclude_id:
        raise Conflict("An asset with this name and type already exists at this base")


def list_assets(
    user: User,
    *,
    base: str | None = None,
    asset_type: str | None = None,
    search: str | None = None,
) -> list[Asset]:
    base = authorization_service.resolve_base(user, base)

    query = db.session.query(Asset)
    if base:
        query = query.filter(Asset.base == base)
    if asset_type:
        query = query.filter(Asset.type == asset_type)
    if search:
        query = query.filter(Asset.name.ilike(f"%{search.strip()}%"))

    return query.order_by(Asset.base.asc(), Asset.type.asc(), Asset.name.asc()).all()


def create_asset(user: User, payload: dict) -> Asset:
    """
    Create an asset at a base.

    opening_balance seeds the closing and available balances. Flushes but does
    not commit; the route owns the commit.
    """
    patch = validate_payload(model=Asset, payload=payload, policy=CREATE_POLICY, partial=False)
    enforce_non_negative(patch, "opening_balance")
    authorization_service.require_base_access(user, patch["base"])
    _ensure_unique(patch["name"], patch["type"], patch["base"])

    asset = Asset(
        name=patch["name"],
        type=patch["type"],
        base=patch["base"],
        description=patch.get("description"),
        opening_balance=patch.get("opening_balance") or 0,
        purchases=0,
        transfer_in=0,
        transfer_out=0,
        assigned=0,
        expended=0,
    )
    asset.recalculate()

    db.session.add(asset)
    db.session.flush()
    return asset


def update_asset(user: User, asset_id: int, payload: dict) -> tuple[Asset, dict]:
    """Update descriptive fields. Returns (asset, changes)."""
    asset = get_asset_for_user(user, asset_id)
    patch = validate_payload(model=Asset, payload=payload, policy=UPDATE_POLICY, partial=True)

    _ensure_unique(
        patch.get("name", asset.name),
        patch.get("type", asset.type),
        asset.base,
        exclude_id=asset.id,
    )

    changes = {}
    for key, value in patch.items():
        if getattr(asset, key) != value:
            changes[key] = {"from": getattr(asset, key), "to": value}
            setattr(asset, key, value)

    db.session.flush()
    return asset, changes


def find_or_create_destination(source: Asset, base: str) -> Asset:
    """Asset with the same name/type at another base, created empty if missing."""
    destination = lock_for_update(
        db.session.query(Asset).filter_by(name=source.name, type=source.type, base=base)
    ).first()
    if destination:
        return destination

    destination = Asset(
        name=source.name,
        type=source.type,
        base=base,
        description=source.description,
        opening_balance=0,
        purchases=0,
        transfer_in=0,
        transfer_out=0,
        assigned=0,
        expended=0,
    )
    destination.recalculate()
    db.session.add(destination)
    db.session.flush()
    return destination
