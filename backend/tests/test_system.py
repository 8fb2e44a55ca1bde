"""
Health, version, CORS and error envelope tests.
"""


def test_health_reports_checks(client, db_session, admin_user):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    body = resp.json
    assert body["status"] == "healthy"
    assert body["checks"]["database"]["details"]["users"] == 1
    assert body["checks"]["session_service"]["status"] == "healthy"


def test_version(client):
    resp = client.get("/api/version")

    assert resp.status_code == 200
    assert resp.json["api_version"] == "1.0.0"
    assert resp.json["environment"] == "testing"


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/does-not-exist")

    assert resp.status_code == 404
    assert resp.json["code"] == "not_found"
    assert "error" in resp.json


def test_wrong_method_uses_error_envelope(client):
    resp = client.delete("/api/health")
    assert resp.status_code == 405
    assert resp.json["code"] == "method_not_allowed"


def test_cors_allowed_origin_is_echoed(client):
    resp = client.get("/api/version", headers={"Origin": "http://localhost:5173"})
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"


def test_cors_unknown_origin_gets_no_header(client):
    resp = client.get("/api/version", headers={"Origin": "http://evil.example"})
    assert "Access-Control-Allow-Origin" not in resp.headers


def test_unexpected_exception_is_500_envelope(app, client, db_session, admin_headers, monkeypatch):
    from mams.services import dashboard_service

    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(dashboard_service, "build_dashboard", explode)

    resp = client.get("/api/dashboard", headers=admin_headers)

    assert resp.status_code == 500
    assert resp.json == {"error": "boom", "code": "server_error"}
