"""
Authorization tests for MAMS.

Verifies:
- Unauthenticated requests return 401
- Each role is denied what the permission table does not grant (403)
- Denials are written to the activity log
- BaseCommanders are confined to their assigned base
- Navigation is filtered by role
"""

import pytest

from mams.errors import Forbidden
from mams.models import ActivityLog, User
from mams.models.activity import ACTION_ACCESS_DENIED
from mams.models.auth import ROLE_ADMIN, ROLE_BASE_COMMANDER, ROLE_LOGISTICS_OFFICER
from mams.permissions import get_all_permission_codes, roles_with_permission
from mams.services import authorization_service


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/dashboard"),
            ("GET", "/api/dashboard/asset/1"),
            ("GET", "/api/dashboard/base/Base-A"),
            ("GET", "/api/assets"),
            ("POST", "/api/assets"),
            ("GET", "/api/transfers"),
            ("POST", "/api/transfers/1/complete"),
            ("GET", "/api/purchases"),
            ("GET", "/api/assignments"),
            ("GET", "/api/expenditures"),
            ("GET", "/api/users"),
            ("GET", "/api/activity-logs"),
            ("POST", "/api/auth/register"),
            ("POST", "/api/auth/logout"),
            ("POST", "/api/auth/logout-all"),
            ("GET", "/api/auth/me"),
            ("PUT", "/api/auth/change-password"),
            ("GET", "/api/auth/navigation"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.json["code"] == "unauthenticated"


# =============================================================================
# ROLE DENIALS (403)
# =============================================================================


class TestCommanderDenied:
    """BaseCommander role cannot administer users or create assets."""

    def test_cannot_list_users(self, client, commander_headers):
        resp = client.get("/api/users", headers=commander_headers)
        assert resp.status_code == 403
        assert resp.json == {"error": "Not authorized", "code": "forbidden"}

    def test_cannot_view_activity_logs(self, client, commander_headers):
        resp = client.get("/api/activity-logs", headers=commander_headers)
        assert resp.status_code == 403

    def test_cannot_create_assets(self, client, commander_headers):
        resp = client.post(
            "/api/assets",
            json={"name": "X", "type": "Vehicle", "base": "Base-A"},
            headers=commander_headers,
        )
        assert resp.status_code == 403


class TestLogisticsDenied:
    """LogisticsOfficer cannot approve movements or touch assignments/expenditures."""

    def test_cannot_complete_transfers(self, client, logistics_headers):
        resp = client.post("/api/transfers/1/complete", headers=logistics_headers)
        assert resp.status_code == 403

    def test_cannot_approve_purchases(self, client, logistics_headers):
        resp = client.post("/api/purchases/1/approve", headers=logistics_headers)
        assert resp.status_code == 403

    def test_cannot_view_assignments(self, client, logistics_headers):
        resp = client.get("/api/assignments", headers=logistics_headers)
        assert resp.status_code == 403

    def test_cannot_create_expenditures(self, client, logistics_headers):
        resp = client.post("/api/expenditures", json={}, headers=logistics_headers)
        assert resp.status_code == 403

    def test_can_view_assets_and_transfers(self, client, logistics_headers):
        assert client.get("/api/assets", headers=logistics_headers).status_code == 200
        assert client.get("/api/transfers", headers=logistics_headers).status_code == 200


class TestDenialAudit:

    def test_denial_writes_access_denied_entry(self, client, db_session, commander_user, commander_headers):
        client.get("/api/users", headers=commander_headers)

        entry = db_session.query(ActivityLog).filter_by(action=ACTION_ACCESS_DENIED).one()
        assert entry.user_id == commander_user.id
        assert entry.details["permission"] == "VIEW_USERS"
        assert entry.details["resource"] == "/api/users"


# =============================================================================
# PERMISSION TABLE
# =============================================================================


class TestPermissionTable:

    def test_admin_holds_every_permission(self):
        for code in get_all_permission_codes():
            assert ROLE_ADMIN in roles_with_permission(code)

    def test_unknown_code_granted_to_nobody(self):
        assert roles_with_permission("LAUNCH_MISSILES") == frozenset()

    def test_check_permission_unknown_code_forbidden(self, db_session, admin_user):
        with pytest.raises(Forbidden):
            authorization_service.check_permission(admin_user, "LAUNCH_MISSILES")

    def test_authorize_rejects_missing_user(self):
        with pytest.raises(Forbidden):
            authorization_service.authorize(None, {ROLE_ADMIN})


# =============================================================================
# BASE SCOPING
# =============================================================================


class TestBaseScoping:

    def test_commander_forced_to_own_base(self, db_session, commander_user):
        assert authorization_service.resolve_base(commander_user, "Base-B") == "Base-A"
        assert authorization_service.resolve_base(commander_user, None) == "Base-A"

    def test_other_roles_get_requested_base(self, db_session, admin_user, logistics_user):
        assert authorization_service.resolve_base(admin_user, "Base-B") == "Base-B"
        assert authorization_service.resolve_base(admin_user, None) is None
        assert authorization_service.resolve_base(logistics_user, "Base-B") == "Base-B"

    def test_require_base_access(self, db_session, commander_user, logistics_user):
        authorization_service.require_base_access(commander_user, "Base-A")
        authorization_service.require_base_access(logistics_user, "Base-B")
        with pytest.raises(Forbidden):
            authorization_service.require_base_access(commander_user, "Base-B")

    def test_commander_without_base_is_forbidden(self, db_session):
        # Bypasses create_user validation to model a legacy row
        user = User(
            username="orphan",
            email="orphan@mams.test",
            full_name="Orphan Commander",
            password_hash="x",
            role=ROLE_BASE_COMMANDER,
            assigned_base=None,
        )
        db_session.add(user)
        db_session.commit()

        with pytest.raises(Forbidden) as exc:
            authorization_service.resolve_base(user, None)
        assert exc.value.message == "No base assigned to this account"


# =============================================================================
# NAVIGATION
# =============================================================================


class TestNavigation:

    def _names(self, client, headers):
        resp = client.get("/api/auth/navigation", headers=headers)
        assert resp.status_code == 200
        return [item["name"] for item in resp.json["items"]]

    def test_admin_sees_everything(self, client, admin_headers):
        assert self._names(client, admin_headers) == [
            "Dashboard", "Assets", "Transfers", "Purchases",
            "Assignments", "Expenditures", "Users", "Settings",
        ]

    def test_commander_menu(self, client, commander_headers):
        assert self._names(client, commander_headers) == [
            "Assets", "Transfers", "Purchases", "Assignments", "Expenditures",
        ]

    def test_logistics_menu(self, client, logistics_headers):
        assert self._names(client, logistics_headers) == ["Assets", "Transfers", "Purchases"]

    @pytest.mark.parametrize("role", [ROLE_ADMIN, ROLE_BASE_COMMANDER, ROLE_LOGISTICS_OFFICER])
    def test_every_role_sees_assets(self, role):
        from mams.permissions import navigation_for_role
        assert any(item["name"] == "Assets" for item in navigation_for_role(role))
