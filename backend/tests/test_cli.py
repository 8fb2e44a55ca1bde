"""
Flask CLI command tests.
"""

import pytest

from mams.models import User

from conftest import get_auth_token


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_system_init_creates_first_admin(runner, db_session):
    result = runner.invoke(args=["system", "init"])

    assert "PASS Created Admin: admin" in result.output
    admin = db_session.query(User).filter_by(username="admin").one()
    assert admin.role == "Admin"


def test_system_init_skips_when_users_exist(runner, db_session, logistics_user):
    result = runner.invoke(args=["system", "init"])

    assert "SKIP" in result.output
    assert db_session.query(User).count() == 1


def test_system_init_rejects_weak_password(runner, db_session):
    result = runner.invoke(args=["system", "init", "--admin-password", "weak"])

    assert "FAIL Password validation failed" in result.output
    assert db_session.query(User).count() == 0


def test_users_create_commander(runner, client, db_session):
    result = runner.invoke(args=[
        "users", "create",
        "--username", "cmdr_c",
        "--email", "cmdr_c@mams.test",
        "--full-name", "Commander Charlie",
        "--password", "Str0ng!Pass",
        "--role", "BaseCommander",
        "--base", "Base-C",
    ])

    assert "PASS Created user: cmdr_c" in result.output
    assert "Str0ng!Pass" not in result.output
    assert get_auth_token(client, "cmdr_c", "Str0ng!Pass")


def test_users_create_commander_without_base_fails(runner, db_session):
    result = runner.invoke(args=[
        "users", "create",
        "--username", "cmdr_x",
        "--email", "cmdr_x@mams.test",
        "--full-name", "Commander X",
        "--password", "Str0ng!Pass",
        "--role", "BaseCommander",
    ])

    assert "FAIL Failed to create user" in result.output


def test_users_list(runner, admin_user, commander_user):
    result = runner.invoke(args=["users", "list"])

    assert "commander_a" in result.output
    assert "Base-A" in result.output


def test_users_deactivate(runner, client, db_session, commander_user):
    get_auth_token(client, "commander_a")

    result = runner.invoke(args=["users", "deactivate", "commander_a"])

    assert "revoked 1 session(s)" in result.output
    db_session.expire_all()
    assert db_session.get(User, commander_user.id).is_active is False


def test_sessions_cleanup(runner, db_session):
    result = runner.invoke(args=["sessions", "cleanup", "--days", "7"])
    assert "PASS Deleted 0 session(s)" in result.output
