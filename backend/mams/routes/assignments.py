# Overview: Flask API routes for assignment operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..models.activity import ACTION_CREATE, ACTION_UPDATE
from ..services import activity_service, assignment_service
from ..services.concurrency import commit_unit_of_work
from ..validation import parse_page_args


assignments_bp = Blueprint("assignments", __name__, url_prefix="/api/assignments")


@assignments_bp.get("")
@require_auth
@require_permission("VIEW_ASSIGNMENTS")
def list_assignments_route():
    limit, offset = parse_page_args(request.args)
    rows, total = assignment_service.list_assignments(
        g.current_user,
        base=request.args.get("base"),
        status=request.args.get("status"),
        limit=limit,
        offset=offset,
    )
    return jsonify({
        "items": [a.to_dict() for a in rows],
        "count": total,
        "limit": limit,
        "offset": offset,
    }), 200


@assignments_bp.get("/<int:assignment_id>")
@require_auth
@require_permission("VIEW_ASSIGNMENTS")
def get_assignment_route(assignment_id: int):
    assignment = assignment_service.get_assignment(g.current_user, assignment_id)
    return jsonify(assignment.to_dict(with_users=True)), 200


@assignments_bp.post("")
@require_auth
@require_permission("MANAGE_ASSIGNMENTS")
def create_assignment_route():
    """
    Assign stock to personnel.

    Request body:
    {
        "asset_id": int,
        "quantity": int,
        "assigned_to": str,
        "notes": str (optional),
        "start_date": ISO-8601 (optional, default now)
    }

    Returns:
        201: Assignment created (Active)
        409: Not enough available stock
    """
    assignment = commit_unit_of_work(
        assignment_service.create_assignment, g.current_user, request.get_json(silent=True)
    )

    activity_service.record(
        g.current_user,
        ACTION_CREATE,
        "Assignment",
        resource_id=assignment.id,
        details={
            "asset_id": assignment.asset_id,
            "assigned_to": assignment.assigned_to,
            "quantity": assignment.quantity,
        },
    )
    return jsonify(assignment.to_dict()), 201


@assignments_bp.post("/<int:assignment_id>/return")
@require_auth
@require_permission("MANAGE_ASSIGNMENTS")
def return_assignment_route(assignment_id: int):
    assignment = commit_unit_of_work(assignment_service.return_assignment, g.current_user, assignment_id)

    activity_service.record(
        g.current_user,
        ACTION_UPDATE,
        "Assignment",
        resource_id=assignment.id,
        details={"status": assignment.status, "quantity": assignment.quantity},
    )
    return jsonify(assignment.to_dict()), 200
