# Overview: Flask API routes for the activity log; read-only, Admin only.

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_permission
from ..services import activity_service
from ..validation import parse_int_arg


activity_logs_bp = Blueprint("activity_logs", __name__, url_prefix="/api/activity-logs")


@activity_logs_bp.get("")
@require_auth
@require_permission("VIEW_ACTIVITY_LOGS")
def list_activity_logs_route():
    """
    Newest-first activity entries.

    Query params: userId, username, action, resourceType, startDate, endDate,
    limit (default 50, max 200), offset.

    Returns {"logs": [...], "count": <rows in this page>, "total": <all matches>}
    """
    rows, total = activity_service.list_activity(
        user_id=parse_int_arg(request.args.get("userId"), "userId"),
        username=request.args.get("username"),
        action=request.args.get("action"),
        resource_type=request.args.get("resourceType"),
        start=request.args.get("startDate"),
        end=request.args.get("endDate"),
        limit=parse_int_arg(
            request.args.get("limit"), "limit", default=activity_service.DEFAULT_PAGE_SIZE
        ),
        offset=parse_int_arg(request.args.get("offset"), "offset", default=0),
    )
    return jsonify({
        "logs": [row.to_dict() for row in rows],
        "count": len(rows),
        "total": total,
    }), 200
