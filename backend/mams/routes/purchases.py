# Overview: Flask API routes for purchase operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..models.activity import ACTION_CREATE, ACTION_UPDATE
from ..services import activity_service, purchase_service
from ..services.concurrency import commit_unit_of_work
from ..validation import parse_page_args


purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/purchases")


@purchases_bp.get("")
@require_auth
@require_permission("VIEW_PURCHASES")
def list_purchases_route():
    limit, offset = parse_page_args(request.args)
    rows, total = purchase_service.list_purchases(
        g.current_user,
        base=request.args.get("base"),
        status=request.args.get("status"),
        limit=limit,
        offset=offset,
    )
    return jsonify({
        "items": [p.to_dict() for p in rows],
        "count": total,
        "limit": limit,
        "offset": offset,
    }), 200


@purchases_bp.get("/<int:purchase_id>")
@require_auth
@require_permission("VIEW_PURCHASES")
def get_purchase_route(purchase_id: int):
    purchase = purchase_service.get_purchase(g.current_user, purchase_id)
    return jsonify(purchase.to_dict(with_users=True)), 200


@purchases_bp.post("")
@require_auth
@require_permission("CREATE_PURCHASES")
def create_purchase_route():
    """
    Record a purchase (Pending until approved).

    Request body:
    {
        "asset_id": int,
        "quantity": int,
        "unit_cost": number (optional),
        "supplier": str (optional),
        "purchase_date": ISO-8601 (optional, default now)
    }
    """
    purchase = commit_unit_of_work(
        purchase_service.create_purchase, g.current_user, request.get_json(silent=True)
    )

    activity_service.record(
        g.current_user,
        ACTION_CREATE,
        "Purchase",
        resource_id=purchase.id,
        details={"asset_id": purchase.asset_id, "base": purchase.base, "quantity": purchase.quantity},
    )
    return jsonify(purchase.to_dict()), 201


@purchases_bp.post("/<int:purchase_id>/approve")
@require_auth
@require_permission("APPROVE_PURCHASES")
def approve_purchase_route(purchase_id: int):
    purchase = commit_unit_of_work(purchase_service.approve_purchase, g.current_user, purchase_id)

    activity_service.record(
        g.current_user,
        ACTION_UPDATE,
        "Purchase",
        resource_id=purchase.id,
        details={"status": purchase.status, "quantity": purchase.quantity},
    )
    return jsonify(purchase.to_dict()), 200


@purchases_bp.post("/<int:purchase_id>/cancel")
@require_auth
@require_permission("APPROVE_PURCHASES")
def cancel_purchase_route(purchase_id: int):
    purchase = commit_unit_of_work(purchase_service.cancel_purchase, g.current_user, purchase_id)

    activity_service.record(
        g.current_user,
        ACTION_UPDATE,
        "Purchase",
        resource_id=purchase.id,
        details={"status": purchase.status},
    )
    return jsonify(purchase.to_dict()), 200
