# Overview: Flask API routes for asset operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..models.activity import ACTION_CREATE, ACTION_UPDATE
from ..services import activity_service, asset_service
from ..services.concurrency import commit_unit_of_work


assets_bp = Blueprint("assets", __name__, url_prefix="/api/assets")


@assets_bp.get("")
@require_auth
@require_permission("VIEW_ASSETS")
def list_assets_route():
    """
    List assets.

    Query params: base, type, search (substring of name).
    BaseCommanders only ever see their own base.
    """
    assets = asset_service.list_assets(
        g.current_user,
        base=request.args.get("base"),
        asset_type=request.args.get("type"),
        search=request.args.get("search"),
    )
    return jsonify({"items": [a.to_dict() for a in assets], "count": len(assets)}), 200


@assets_bp.get("/<int:asset_id>")
@require_auth
@require_permission("VIEW_ASSETS")
def get_asset_route(asset_id: int):
    asset = asset_service.get_asset_for_user(g.current_user, asset_id)
    return jsonify(asset.to_dict()), 200


@assets_bp.post("")
@require_auth
@require_permission("CREATE_ASSETS")
def create_asset_route():
    """
    Create an asset.

    Request body:
    {
        "name": str,
        "type": str,
        "base": str,
        "description": str (optional),
        "opening_balance": int (optional, default 0)
    }
    """
    asset = commit_unit_of_work(
        asset_service.create_asset, g.current_user, request.get_json(silent=True)
    )

    activity_service.record(
        g.current_user,
        ACTION_CREATE,
        "Asset",
        resource_id=asset.id,
        details={"name": asset.name, "type": asset.type, "base": asset.base,
                 "opening_balance": asset.opening_balance},
    )
    return jsonify(asset.to_dict()), 201


@assets_bp.put("/<int:asset_id>")
@require_auth
@require_permission("UPDATE_ASSETS")
def update_asset_route(asset_id: int):
    """Update name, type or description. Balances only change through movements."""
    asset, changes = commit_unit_of_work(
        asset_service.update_asset, g.current_user, asset_id, request.get_json(silent=True)
    )

    if changes:
        activity_service.record(
            g.current_user,
            ACTION_UPDATE,
            "Asset",
            resource_id=asset.id,
            details={"changes": changes},
        )
    return jsonify(asset.to_dict()), 200
