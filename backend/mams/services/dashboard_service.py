# Overview: Service-layer operations for the dashboard; summary, grouping and recent activity.

"""
Dashboard Aggregator

Read-only shaping of asset balances and recent movements.

- summarize_assets() is a single pass over the matched assets producing the
  summary totals and the per-type groups. Groups partition the matched set,
  so their counts add up to totalAssets.
- Each recent list is an independent bounded query (RECENT_LIMIT rows),
  newest first by the record's own date field, which is also the field the
  date range applies to.
- Stored balances are summed as they are; nothing is recomputed here.

Base scoping is resolved by authorization_service before any query runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..errors import ValidationError
from ..extensions import db
from ..models import Asset, Assignment, Expenditure, Purchase, Transfer, User
from . import asset_service, authorization_service
from mams.time_utils import end_of_day, is_date_only, parse_iso_datetime, to_utc_z


RECENT_LIMIT = 5
DETAIL_LIMIT = 10

# (Asset attribute, summary key, group key)
BALANCE_FIELDS = (
    ("opening_balance", "totalOpeningBalance", "openingBalance"),
    ("closing_balance", "totalClosingBalance", "closingBalance"),
    ("purchases", "totalPurchases", "purchases"),
    ("transfer_in", "totalTransferIn", "transferIn"),
    ("transfer_out", "totalTransferOut", "transferOut"),
    ("assigned", "totalAssigned", "assigned"),
    ("expended", "totalExpended", "expended"),
    ("available", "totalAvailable", "available"),
)

# Date column each record type is ordered and range-filtered by
DATE_COLUMNS = {
    Transfer: Transfer.created_at,
    Purchase: Purchase.purchase_date,
    Assignment: Assignment.start_date,
    Expenditure: Expenditure.expenditure_date,
}


@dataclass(frozen=True)
class DashboardFilter:
    base: str | None = None
    asset_type: str | None = None
    start: datetime | None = None
    end: datetime | None = None

    def to_dict(self, requested_base: str | None = None) -> dict:
        return {
            "base": self.base,
            "requestedBase": requested_base,
            "assetType": self.asset_type,
            "startDate": to_utc_z(self.start),
            "endDate": to_utc_z(self.end),
        }


def _parse_date(value: str | None, field: str, *, end: bool = False) -> datetime | None:
    if value is None or not value.strip():
        return None
    try:
        parsed = parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 date or datetime")
    # A bare date as the upper bound covers the whole day
    if end and is_date_only(value):
        parsed = end_of_day(parsed)
    return parsed


def parse_filters(
    base: str | None = None,
    asset_type: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> DashboardFilter:
    """Validate raw query-string values into a DashboardFilter."""
    start = _parse_date(start_date, "startDate")
    end = _parse_date(end_date, "endDate", end=True)
    if start and end and start > end:
        raise ValidationError("startDate must not be after endDate")
    return DashboardFilter(
        base=(base or "").strip() or None,
        asset_type=(asset_type or "").strip() or None,
        start=start,
        end=end,
    )


def _empty_totals(keys) -> dict:
    return {key: 0 for key in keys}


def summarize_assets(assets) -> tuple[dict, dict]:
    """
    Summary totals and per-type groups for a set of assets.

    Returns (summary, assets_by_type). With no assets every total is zero and
    the grouping is empty.
    """
    summary = {"totalAssets": 0, **_empty_totals(key for _, key, _ in BALANCE_FIELDS)}
    groups: dict[str, dict] = {}

    for asset in assets:
        group = groups.get(asset.type)
        if group is None:
            group = {
                "type": asset.type,
                "count": 0,
                **_empty_totals(key for _, _, key in BALANCE_FIELDS),
            }
            groups[asset.type] = group

        summary["totalAssets"] += 1
        group["count"] += 1
        for attr, total_key, group_key in BALANCE_FIELDS:
            value = getattr(asset, attr) or 0
            summary[total_key] += value
            group[group_key] += value

    return summary, groups


def _matched_assets(filters: DashboardFilter) -> list[Asset]:
    query = db.session.query(Asset)
    if filters.base:
        query = query.filter(Asset.base == filters.base)
    if filters.asset_type:
        query = query.filter(Asset.type == filters.asset_type)
    return query.all()


def _recent(model, filters: DashboardFilter, limit: int = RECENT_LIMIT) -> list:
    date_col = DATE_COLUMNS[model]
    query = db.session.query(model)

    if filters.base:
        if model is Transfer:
            query = query.filter(db.or_(Transfer.from_base == filters.base, Transfer.to_base == filters.base))
        else:
            query = query.filter(model.base == filters.base)

    if filters.asset_type:
        query = query.join(Asset, model.asset_id == Asset.id).filter(Asset.type == filters.asset_type)

    if filters.start:
        query = query.filter(date_col >= filters.start)
    if filters.end:
        query = query.filter(date_col <= filters.end)

    return query.order_by(date_col.desc(), model.id.desc()).limit(limit).all()


def _aggregate(filters: DashboardFilter) -> dict:
    summary, assets_by_type = summarize_assets(_matched_assets(filters))
    return {
        "summary": summary,
        "assetsByType": assets_by_type,
        "recentTransfers": [t.to_dict() for t in _recent(Transfer, filters)],
        "recentPurchases": [p.to_dict() for p in _recent(Purchase, filters)],
        "recentAssignments": [a.to_dict() for a in _recent(Assignment, filters)],
        "recentExpenditures": [e.to_dict() for e in _recent(Expenditure, filters)],
    }


def build_dashboard(
    user: User,
    *,
    base: str | None = None,
    asset_type: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> dict:
    """
    Dashboard for the caller.

    A BaseCommander's requested base is replaced by their assigned base; the
    returned "filters" shows what was actually applied.
    """
    requested = parse_filters(base, asset_type, start_date, end_date)
    effective = DashboardFilter(
        base=authorization_service.resolve_base(user, requested.base),
        asset_type=requested.asset_type,
        start=requested.start,
        end=requested.end,
    )

    data = _aggregate(effective)
    data["filters"] = effective.to_dict(requested_base=requested.base)
    return data


def asset_detail(user: User, asset_id: int) -> dict:
    """Asset plus its last DETAIL_LIMIT records of each movement type, with users embedded."""
    asset = asset_service.get_asset_for_user(user, asset_id)

    def history(model):
        date_col = DATE_COLUMNS[model]
        rows = (
            db.session.query(model)
            .filter(model.asset_id == asset.id)
            .order_by(date_col.desc(), model.id.desc())
            .limit(DETAIL_LIMIT)
            .all()
        )
        return [row.to_dict(with_users=True) for row in rows]

    return {
        "asset": asset.to_dict(),
        "transfers": history(Transfer),
        "purchases": history(Purchase),
        "assignments": history(Assignment),
        "expenditures": history(Expenditure),
    }


def base_dashboard(user: User, base: str) -> dict:
    """Unfiltered dashboard for one base; BaseCommanders only get their own."""
    authorization_service.require_base_access(user, base)
    data = _aggregate(DashboardFilter(base=base))
    data["base"] = base
    return data
