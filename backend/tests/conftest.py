"""
Pytest fixtures for MAMS backend tests.

Provides test database setup, one user per role, base-scoped fixtures, and
test client.
"""

import pytest
from mams import create_app
from mams.extensions import db
from mams.models import Asset
from mams.models.auth import ROLE_ADMIN, ROLE_BASE_COMMANDER, ROLE_LOGISTICS_OFFICER
from mams.services.auth_service import create_user


PASSWORD = "Password123!"
BASE_A = "Base-A"
BASE_B = "Base-B"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'APP_ENV': 'testing',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def admin_user(db_session):
    return create_user(
        username="admin",
        email="admin@mams.test",
        password=PASSWORD,
        full_name="System Administrator",
        role=ROLE_ADMIN,
    )


@pytest.fixture(scope='function')
def commander_user(db_session):
    """BaseCommander assigned to Base-A."""
    return create_user(
        username="commander_a",
        email="commander_a@mams.test",
        password=PASSWORD,
        full_name="Commander Alpha",
        role=ROLE_BASE_COMMANDER,
        assigned_base=BASE_A,
    )


@pytest.fixture(scope='function')
def commander_b_user(db_session):
    """BaseCommander assigned to Base-B."""
    return create_user(
        username="commander_b",
        email="commander_b@mams.test",
        password=PASSWORD,
        full_name="Commander Bravo",
        role=ROLE_BASE_COMMANDER,
        assigned_base=BASE_B,
    )


@pytest.fixture(scope='function')
def logistics_user(db_session):
    return create_user(
        username="logistics",
        email="logistics@mams.test",
        password=PASSWORD,
        full_name="Logistics Officer",
        role=ROLE_LOGISTICS_OFFICER,
    )


def make_asset(name: str, asset_type: str, base: str, opening: int = 0, **balances) -> Asset:
    """Persist an asset; balances not given are derived from the invariant."""
    asset = Asset(
        name=name,
        type=asset_type,
        base=base,
        opening_balance=opening,
        purchases=balances.pop("purchases", 0),
        transfer_in=balances.pop("transfer_in", 0),
        transfer_out=balances.pop("transfer_out", 0),
        assigned=balances.pop("assigned", 0),
        expended=balances.pop("expended", 0),
    )
    asset.recalculate()
    for key, value in balances.items():
        setattr(asset, key, value)
    db.session.add(asset)
    db.session.commit()
    return asset


@pytest.fixture(scope='function')
def rifles_a(db_session):
    return make_asset("M4 Carbine", "Weapon", BASE_A, opening=50)


@pytest.fixture(scope='function')
def trucks_a(db_session):
    return make_asset("LMTV Truck", "Vehicle", BASE_A, opening=10)


@pytest.fixture(scope='function')
def rounds_b(db_session):
    return make_asset("5.56mm Round", "Ammunition", BASE_B, opening=1000)


def get_auth_token(client, username: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, admin_user.username))


@pytest.fixture(scope='function')
def commander_headers(client, commander_user):
    return auth_headers(get_auth_token(client, commander_user.username))


@pytest.fixture(scope='function')
def commander_b_headers(client, commander_b_user):
    return auth_headers(get_auth_token(client, commander_b_user.username))


@pytest.fixture(scope='function')
def logistics_headers(client, logistics_user):
    return auth_headers(get_auth_token(client, logistics_user.username))
