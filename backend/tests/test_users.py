"""
User administration tests (Admin only).
"""

from mams.models import ActivityLog

from conftest import BASE_A, BASE_B, auth_headers, get_auth_token


class TestListUsers:

    def test_lists_active_users(self, client, admin_headers, commander_user, logistics_user):
        resp = client.get("/api/users", headers=admin_headers)

        assert resp.status_code == 200
        assert [u["username"] for u in resp.json["items"]] == ["admin", "commander_a", "logistics"]
        assert all("password_hash" not in u for u in resp.json["items"])

    def test_filters(self, client, admin_headers, commander_user, commander_b_user, logistics_user):
        resp = client.get(f"/api/users?role=BaseCommander&base={BASE_B}", headers=admin_headers)
        assert [u["username"] for u in resp.json["items"]] == ["commander_b"]

    def test_inactive_hidden_unless_requested(self, client, db_session, admin_headers, logistics_user):
        logistics_user.is_active = False
        db_session.commit()

        assert client.get("/api/users", headers=admin_headers).json["count"] == 1
        resp = client.get("/api/users?includeInactive=true", headers=admin_headers)
        assert resp.json["count"] == 2

    def test_unknown_role_is_400(self, client, admin_headers):
        resp = client.get("/api/users?role=Colonel", headers=admin_headers)
        assert resp.status_code == 400

    def test_get_reports_active_sessions(self, client, admin_headers, commander_user):
        get_auth_token(client, "commander_a")

        resp = client.get(f"/api/users/{commander_user.id}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json["active_sessions"] == 1

    def test_missing_user_is_404(self, client, admin_headers):
        assert client.get("/api/users/9999", headers=admin_headers).status_code == 404


class TestUpdateUser:

    def test_reassign_base(self, client, db_session, admin_headers, commander_user):
        resp = client.put(
            f"/api/users/{commander_user.id}",
            json={"assigned_base": BASE_B},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        assert resp.json["assigned_base"] == BASE_B
        entry = db_session.query(ActivityLog).filter_by(action="Update", resource_type="User").one()
        assert entry.details["changes"]["assigned_base"] == {"from": BASE_A, "to": BASE_B}

    def test_commander_cannot_lose_base(self, client, admin_headers, commander_user):
        resp = client.put(
            f"/api/users/{commander_user.id}",
            json={"assigned_base": None},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_email_taken_is_409(self, client, admin_headers, commander_user):
        resp = client.put(
            f"/api/users/{commander_user.id}",
            json={"email": "admin@mams.test"},
            headers=admin_headers,
        )
        assert resp.status_code == 409

    def test_password_not_writable(self, client, admin_headers, commander_user):
        resp = client.put(
            f"/api/users/{commander_user.id}",
            json={"password_hash": "x"},
            headers=admin_headers,
        )
        assert resp.status_code == 400


class TestActivation:

    def test_deactivate_revokes_sessions(self, client, admin_headers, commander_user):
        token = get_auth_token(client, "commander_a")

        resp = client.post(f"/api/users/{commander_user.id}/deactivate", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json["user"]["is_active"] is False
        assert resp.json["sessions_revoked"] == 1
        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401
        assert get_auth_token(client, "commander_a") is None

    def test_cannot_deactivate_self(self, client, admin_user, admin_headers):
        resp = client.post(f"/api/users/{admin_user.id}/deactivate", headers=admin_headers)
        assert resp.status_code == 400

    def test_deactivate_twice_is_409(self, client, admin_headers, logistics_user):
        client.post(f"/api/users/{logistics_user.id}/deactivate", headers=admin_headers)
        resp = client.post(f"/api/users/{logistics_user.id}/deactivate", headers=admin_headers)
        assert resp.status_code == 409

    def test_reactivate_allows_login(self, client, admin_headers, logistics_user):
        client.post(f"/api/users/{logistics_user.id}/deactivate", headers=admin_headers)

        resp = client.post(f"/api/users/{logistics_user.id}/activate", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json["user"]["is_active"] is True
        assert get_auth_token(client, "logistics")

    def test_commander_cannot_deactivate(self, client, commander_headers, logistics_user):
        resp = client.post(f"/api/users/{logistics_user.id}/deactivate", headers=commander_headers)
        assert resp.status_code == 403
