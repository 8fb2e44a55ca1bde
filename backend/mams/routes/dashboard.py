# Overview: Flask API routes for dashboard operations; parses input and returns JSON responses.

"""
Dashboard API routes.

Query parameters for GET /api/dashboard:
- base: restrict to one base (ignored for BaseCommanders, who always get their own)
- assetType: restrict to one equipment type
- startDate / endDate: ISO-8601 date or datetime; a bare endDate date covers the whole day
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..services import dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
@require_auth
@require_permission("VIEW_DASHBOARD")
def dashboard_route():
    data = dashboard_service.build_dashboard(
        g.current_user,
        base=request.args.get("base"),
        asset_type=request.args.get("assetType"),
        start_date=request.args.get("startDate"),
        end_date=request.args.get("endDate"),
    )
    return jsonify(data), 200


@dashboard_bp.get("/asset/<int:asset_id>")
@require_auth
@require_permission("VIEW_DASHBOARD")
def asset_detail_route(asset_id: int):
    """
    Asset with its recent movement history.

    Returns:
        200: {"asset", "transfers", "purchases", "assignments", "expenditures"}
        403: Asset belongs to another base (BaseCommander)
        404: Asset not found
    """
    return jsonify(dashboard_service.asset_detail(g.current_user, asset_id)), 200


@dashboard_bp.get("/base/<string:base>")
@require_auth
@require_permission("VIEW_DASHBOARD")
def base_dashboard_route(base: str):
    return jsonify(dashboard_service.base_dashboard(g.current_user, base)), 200
