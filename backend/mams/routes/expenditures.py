# Overview: Flask API routes for expenditure operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..models.activity import ACTION_CREATE
from ..services import activity_service, expenditure_service
from ..services.concurrency import commit_unit_of_work
from ..validation import parse_page_args


expenditures_bp = Blueprint("expenditures", __name__, url_prefix="/api/expenditures")


@expenditures_bp.get("")
@require_auth
@require_permission("VIEW_EXPENDITURES")
def list_expenditures_route():
    limit, offset = parse_page_args(request.args)
    rows, total = expenditure_service.list_expenditures(
        g.current_user,
        base=request.args.get("base"),
        limit=limit,
        offset=offset,
    )
    return jsonify({
        "items": [e.to_dict() for e in rows],
        "count": total,
        "limit": limit,
        "offset": offset,
    }), 200


@expenditures_bp.get("/<int:expenditure_id>")
@require_auth
@require_permission("VIEW_EXPENDITURES")
def get_expenditure_route(expenditure_id: int):
    expenditure = expenditure_service.get_expenditure(g.current_user, expenditure_id)
    return jsonify(expenditure.to_dict(with_users=True)), 200


@expenditures_bp.post("")
@require_auth
@require_permission("CREATE_EXPENDITURES")
def create_expenditure_route():
    """
    Expend stock.

    Request body:
    {
        "asset_id": int,
        "quantity": int,
        "reason": str,
        "expenditure_date": ISO-8601 (optional, default now)
    }
    """
    expenditure = commit_unit_of_work(
        expenditure_service.create_expenditure, g.current_user, request.get_json(silent=True)
    )

    activity_service.record(
        g.current_user,
        ACTION_CREATE,
        "Expenditure",
        resource_id=expenditure.id,
        details={
            "asset_id": expenditure.asset_id,
            "quantity": expenditure.quantity,
            "reason": expenditure.reason,
        },
    )
    return jsonify(expenditure.to_dict()), 201
