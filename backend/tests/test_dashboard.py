"""
Dashboard aggregation tests.

Covers the pure summary/grouping pass, base scoping of the aggregate views,
bounded recent lists, filters and the asset / per-base detail views.
"""

from datetime import datetime, timedelta

import pytest

from mams.errors import ValidationError
from mams.extensions import db
from mams.models import Asset, Assignment, Expenditure, Purchase, Transfer
from mams.services import dashboard_service

from conftest import BASE_A, BASE_B, make_asset


T0 = datetime(2026, 3, 1, 12, 0, 0)


def _transfer(asset, user, from_base, to_base, created_at, quantity=1):
    transfer = Transfer(
        asset_id=asset.id,
        from_base=from_base,
        to_base=to_base,
        quantity=quantity,
        transferred_by_id=user.id,
        created_at=created_at,
    )
    db.session.add(transfer)
    return transfer


# =============================================================================
# summarize_assets (pure)
# =============================================================================


class TestSummarizeAssets:

    def test_worked_example(self):
        assets = [
            Asset(name="Humvee", type="Vehicle", base=BASE_A, opening_balance=10,
                  closing_balance=12, assigned=3, available=9),
            Asset(name="Rifle", type="Weapon", base=BASE_A, opening_balance=5,
                  closing_balance=5, assigned=2, available=3),
        ]

        summary, groups = dashboard_service.summarize_assets(assets)

        assert summary["totalAssets"] == 2
        assert summary["totalAssigned"] == 5
        assert summary["totalAvailable"] == 12
        assert summary["totalOpeningBalance"] == 15
        assert summary["totalClosingBalance"] == 17
        assert set(groups) == {"Vehicle", "Weapon"}
        assert groups["Vehicle"]["count"] == 1
        assert groups["Weapon"]["count"] == 1
        assert groups["Vehicle"]["available"] == 9

    def test_empty_set_is_all_zero(self):
        summary, groups = dashboard_service.summarize_assets([])

        assert groups == {}
        assert set(summary) == {
            "totalAssets", "totalOpeningBalance", "totalClosingBalance",
            "totalPurchases", "totalTransferIn", "totalTransferOut",
            "totalAssigned", "totalExpended", "totalAvailable",
        }
        assert all(value == 0 for value in summary.values())

    def test_groups_partition_the_set(self):
        assets = [
            Asset(name=f"A{i}", type=kind, base=BASE_A, closing_balance=i, assigned=0, available=i)
            for i, kind in enumerate(["Vehicle", "Weapon", "Vehicle", "Ammunition", "Weapon", "Vehicle"])
        ]

        summary, groups = dashboard_service.summarize_assets(assets)

        assert sum(g["count"] for g in groups.values()) == summary["totalAssets"] == 6
        assert groups["Vehicle"]["count"] == 3
        assert sum(g["available"] for g in groups.values()) == summary["totalAvailable"]

    def test_available_sums_stored_values(self):
        # Stored values are summed as-is, even when they break the invariant
        assets = [Asset(name="Odd", type="Vehicle", base=BASE_A, closing_balance=10, assigned=2, available=99)]
        summary, _ = dashboard_service.summarize_assets(assets)
        assert summary["totalAvailable"] == 99


# =============================================================================
# FILTER PARSING
# =============================================================================


class TestParseFilters:

    def test_date_only_end_covers_whole_day(self):
        filters = dashboard_service.parse_filters(start_date="2026-03-01", end_date="2026-03-01")
        assert filters.start == datetime(2026, 3, 1)
        assert filters.end.date() == datetime(2026, 3, 1).date()
        assert filters.end.hour == 23

    def test_unparsable_date_rejected(self):
        with pytest.raises(ValidationError):
            dashboard_service.parse_filters(start_date="yesterday")

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError):
            dashboard_service.parse_filters(start_date="2026-03-02", end_date="2026-03-01")

    def test_blank_values_are_none(self):
        filters = dashboard_service.parse_filters(base="  ", asset_type="")
        assert filters.base is None
        assert filters.asset_type is None


# =============================================================================
# GET /api/dashboard
# =============================================================================


class TestDashboardEndpoint:

    def test_admin_sees_all_bases(self, client, admin_headers, rifles_a, trucks_a, rounds_b):
        resp = client.get("/api/dashboard", headers=admin_headers)

        assert resp.status_code == 200
        body = resp.json
        assert body["summary"]["totalAssets"] == 3
        assert body["summary"]["totalAvailable"] == 1060
        assert set(body["assetsByType"]) == {"Weapon", "Vehicle", "Ammunition"}
        assert body["filters"]["base"] is None

    def test_admin_base_filter(self, client, admin_headers, rifles_a, trucks_a, rounds_b):
        resp = client.get(f"/api/dashboard?base={BASE_B}", headers=admin_headers)

        assert resp.json["summary"]["totalAssets"] == 1
        assert resp.json["summary"]["totalAvailable"] == 1000

    def test_commander_request_for_other_base_is_replaced(
        self, client, commander_headers, rifles_a, trucks_a, rounds_b
    ):
        resp = client.get(f"/api/dashboard?base={BASE_B}", headers=commander_headers)

        assert resp.status_code == 200
        body = resp.json
        assert body["filters"]["base"] == BASE_A
        assert body["filters"]["requestedBase"] == BASE_B
        assert body["summary"]["totalAssets"] == 2
        assert "Ammunition" not in body["assetsByType"]

    def test_commander_recent_lists_ignore_requested_base(
        self, client, db_session, admin_user, commander_headers, rifles_a, trucks_a, rounds_b
    ):
        _transfer(rifles_a, admin_user, BASE_A, BASE_B, T0)
        db.session.add(Purchase(asset_id=rifles_a.id, base=BASE_A, quantity=5,
                                purchased_by_id=admin_user.id, purchase_date=T0))
        db.session.add(Assignment(asset_id=trucks_a.id, base=BASE_A, quantity=1, assigned_to="1st Platoon",
                                  assigned_by_id=admin_user.id, start_date=T0))
        db.session.add(Expenditure(asset_id=rifles_a.id, base=BASE_A, quantity=1, reason="Training",
                                   authorized_by_id=admin_user.id, expenditure_date=T0))

        _transfer(rounds_b, admin_user, BASE_B, "Base-C", T0 + timedelta(hours=1))
        db.session.add(Purchase(asset_id=rounds_b.id, base=BASE_B, quantity=100,
                                purchased_by_id=admin_user.id, purchase_date=T0 + timedelta(hours=1)))
        db.session.add(Assignment(asset_id=rounds_b.id, base=BASE_B, quantity=50, assigned_to="2nd Platoon",
                                  assigned_by_id=admin_user.id, start_date=T0 + timedelta(hours=1)))
        db.session.add(Expenditure(asset_id=rounds_b.id, base=BASE_B, quantity=10, reason="Range day",
                                   authorized_by_id=admin_user.id, expenditure_date=T0 + timedelta(hours=1)))
        db_session.commit()

        body = client.get(f"/api/dashboard?base={BASE_B}", headers=commander_headers).json

        assert len(body["recentTransfers"]) == 1
        assert all(BASE_A in (t["from_base"], t["to_base"]) for t in body["recentTransfers"])
        for key in ("recentPurchases", "recentAssignments", "recentExpenditures"):
            assert len(body[key]) == 1
            assert {row["base"] for row in body[key]} == {BASE_A}

    def test_asset_type_filter(self, client, admin_headers, rifles_a, trucks_a, rounds_b):
        resp = client.get("/api/dashboard?assetType=Vehicle", headers=admin_headers)

        assert resp.json["summary"]["totalAssets"] == 1
        assert list(resp.json["assetsByType"]) == ["Vehicle"]

    def test_no_match_is_all_zero(self, client, admin_headers, rifles_a):
        resp = client.get("/api/dashboard?base=Nowhere", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json["summary"]["totalAssets"] == 0
        assert resp.json["summary"]["totalAvailable"] == 0
        assert resp.json["assetsByType"] == {}
        assert resp.json["recentTransfers"] == []

    def test_bad_date_is_400(self, client, admin_headers):
        resp = client.get("/api/dashboard?startDate=not-a-date", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "validation_error"

    def test_recent_transfers_bounded_and_newest_first(
        self, client, db_session, admin_user, admin_headers, rifles_a, rounds_b
    ):
        for i in range(7):
            _transfer(rifles_a, admin_user, BASE_A, BASE_B, T0 + timedelta(hours=i))
        # Inbound to Base-A counts too
        _transfer(rounds_b, admin_user, BASE_B, BASE_A, T0 + timedelta(hours=10))
        # Unrelated to Base-A
        _transfer(rounds_b, admin_user, BASE_B, "Base-C", T0 + timedelta(hours=20))
        db_session.commit()

        resp = client.get(f"/api/dashboard?base={BASE_A}", headers=admin_headers)

        recent = resp.json["recentTransfers"]
        assert len(recent) == 5
        assert all(BASE_A in (t["from_base"], t["to_base"]) for t in recent)
        created = [t["created_at"] for t in recent]
        assert created == sorted(created, reverse=True)
        assert recent[0]["to_base"] == BASE_A
        assert recent[0]["asset_name"] == "5.56mm Round"

    def test_recent_lists_respect_date_range(
        self, client, db_session, admin_user, admin_headers, rifles_a
    ):
        _transfer(rifles_a, admin_user, BASE_A, BASE_B, T0)
        _transfer(rifles_a, admin_user, BASE_A, BASE_B, T0 + timedelta(days=2))
        db.session.add(Expenditure(
            asset_id=rifles_a.id, base=BASE_A, quantity=1, reason="Training",
            authorized_by_id=admin_user.id, expenditure_date=T0 + timedelta(days=5),
        ))
        db_session.commit()

        resp = client.get(
            "/api/dashboard?startDate=2026-03-01&endDate=2026-03-01",
            headers=admin_headers,
        )

        assert len(resp.json["recentTransfers"]) == 1
        assert resp.json["recentExpenditures"] == []

    def test_recent_lists_respect_asset_type(
        self, client, db_session, admin_user, admin_headers, rifles_a, trucks_a
    ):
        db.session.add(Purchase(asset_id=rifles_a.id, base=BASE_A, quantity=5,
                                purchased_by_id=admin_user.id, purchase_date=T0))
        db.session.add(Purchase(asset_id=trucks_a.id, base=BASE_A, quantity=1,
                                purchased_by_id=admin_user.id, purchase_date=T0))
        db.session.add(Assignment(asset_id=trucks_a.id, base=BASE_A, quantity=1, assigned_to="1st Platoon",
                                  assigned_by_id=admin_user.id, start_date=T0))
        db_session.commit()

        resp = client.get("/api/dashboard?assetType=Weapon", headers=admin_headers)

        assert [p["asset_type"] for p in resp.json["recentPurchases"]] == ["Weapon"]
        assert resp.json["recentAssignments"] == []


# =============================================================================
# ASSET DETAIL / BASE DASHBOARD
# =============================================================================


class TestAssetDetail:

    def test_detail_embeds_users_and_limits_history(
        self, client, db_session, admin_user, admin_headers, rifles_a
    ):
        for i in range(12):
            _transfer(rifles_a, admin_user, BASE_A, BASE_B, T0 + timedelta(minutes=i))
        db_session.commit()

        resp = client.get(f"/api/dashboard/asset/{rifles_a.id}", headers=admin_headers)

        assert resp.status_code == 200
        body = resp.json
        assert body["asset"]["name"] == "M4 Carbine"
        assert len(body["transfers"]) == 10
        assert body["transfers"][0]["transferred_by"] == {
            "id": admin_user.id, "username": "admin", "fullName": "System Administrator",
        }
        assert body["purchases"] == []

    def test_missing_asset_is_404(self, client, admin_headers):
        resp = client.get("/api/dashboard/asset/9999", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json["code"] == "not_found"

    def test_commander_outside_base_is_403(self, client, commander_headers, rounds_b):
        resp = client.get(f"/api/dashboard/asset/{rounds_b.id}", headers=commander_headers)
        assert resp.status_code == 403

    def test_commander_own_base_allowed(self, client, commander_headers, rifles_a):
        resp = client.get(f"/api/dashboard/asset/{rifles_a.id}", headers=commander_headers)
        assert resp.status_code == 200


class TestBaseDashboard:

    def test_base_dashboard(self, client, admin_headers, rifles_a, trucks_a, rounds_b):
        resp = client.get(f"/api/dashboard/base/{BASE_A}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json["base"] == BASE_A
        assert resp.json["summary"]["totalAssets"] == 2

    def test_commander_other_base_is_403(self, client, commander_headers, rounds_b):
        resp = client.get(f"/api/dashboard/base/{BASE_B}", headers=commander_headers)
        assert resp.status_code == 403

    def test_logistics_is_cross_base(self, client, logistics_headers, rounds_b):
        resp = client.get(f"/api/dashboard/base/{BASE_B}", headers=logistics_headers)
        assert resp.status_code == 200
        assert resp.json["summary"]["totalAssets"] == 1


def test_invariant_fixture_sanity(db_session):
    asset = make_asset("Test", "Vehicle", BASE_A, opening=10, purchases=5, assigned=3, expended=2)
    assert asset.closing_balance == 13
    assert asset.available == 10
