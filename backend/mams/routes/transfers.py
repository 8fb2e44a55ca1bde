# Overview: HTTP routes for inter-base transfers; create, list, complete and cancel.

"""
Inter-base transfer API routes.

Lifecycle: POST "" (Pending) -> POST /<id>/complete | POST /<id>/cancel
"""
from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..models.activity import ACTION_CREATE, ACTION_UPDATE
from ..services import activity_service, transfer_service
from ..services.concurrency import commit_unit_of_work
from ..validation import parse_page_args


transfers_bp = Blueprint("transfers", __name__, url_prefix="/api/transfers")


@transfers_bp.get("")
@require_auth
@require_permission("VIEW_TRANSFERS")
def list_transfers_route():
    """
    List transfers, newest first.

    Query params: base (matches either end of the transfer), status, limit, offset.
    """
    limit, offset = parse_page_args(request.args)
    rows, total = transfer_service.list_transfers(
        g.current_user,
        base=request.args.get("base"),
        status=request.args.get("status"),
        limit=limit,
        offset=offset,
    )
    return jsonify({
        "items": [t.to_dict() for t in rows],
        "count": total,
        "limit": limit,
        "offset": offset,
    }), 200


@transfers_bp.get("/<int:transfer_id>")
@require_auth
@require_permission("VIEW_TRANSFERS")
def get_transfer_route(transfer_id: int):
    transfer = transfer_service.get_transfer(g.current_user, transfer_id)
    return jsonify(transfer.to_dict(with_users=True)), 200


@transfers_bp.post("")
@require_auth
@require_permission("CREATE_TRANSFERS")
def create_transfer_route():
    """
    Request a transfer.

    Request body:
    {
        "asset_id": int,
        "to_base": str,
        "quantity": int,
        "notes": str (optional)
    }

    Returns:
        201: Transfer created (Pending)
        400: Invalid request
        403: Asset belongs to another base
        409: Not enough available stock
    """
    transfer = commit_unit_of_work(
        transfer_service.create_transfer, g.current_user, request.get_json(silent=True)
    )

    activity_service.record(
        g.current_user,
        ACTION_CREATE,
        "Transfer",
        resource_id=transfer.id,
        details={
            "asset_id": transfer.asset_id,
            "from_base": transfer.from_base,
            "to_base": transfer.to_base,
            "quantity": transfer.quantity,
        },
    )
    return jsonify(transfer.to_dict()), 201


@transfers_bp.post("/<int:transfer_id>/complete")
@require_auth
@require_permission("APPROVE_TRANSFERS")
def complete_transfer_route(transfer_id: int):
    """
    Complete a pending transfer; stock moves between the bases.

    Returns:
        200: Transfer completed
        409: Not Pending, or not enough available stock left
    """
    transfer = commit_unit_of_work(transfer_service.complete_transfer, g.current_user, transfer_id)

    activity_service.record(
        g.current_user,
        ACTION_UPDATE,
        "Transfer",
        resource_id=transfer.id,
        details={"status": transfer.status, "quantity": transfer.quantity},
    )
    return jsonify(transfer.to_dict()), 200


@transfers_bp.post("/<int:transfer_id>/cancel")
@require_auth
@require_permission("APPROVE_TRANSFERS")
def cancel_transfer_route(transfer_id: int):
    transfer = commit_unit_of_work(transfer_service.cancel_transfer, g.current_user, transfer_id)

    activity_service.record(
        g.current_user,
        ACTION_UPDATE,
        "Transfer",
        resource_id=transfer.id,
        details={"status": transfer.status},
    )
    return jsonify(transfer.to_dict()), 200
