"""
Pytest fixtures for the stockroom backend tests.

Provides an in-memory SQLite app, a per-test table wipe, admin/user
accounts and Authorization header helpers.
"""

import pytest

from stockroom import create_app
from stockroom.extensions import db
from stockroom.models import InventoryRecord
from stockroom.services import auth_service, token_service
from stockroom.services.permission_service import ROLE_ADMIN, ROLE_USER, ROLE_COUNTER


DEFAULT_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'JWT_SECRET': 'test-jwt-secret',
        'BCRYPT_ROUNDS': 4,
        'ALLOWED_ORIGINS': ['http://localhost:3000'],
    })

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh tables and a fresh app context (and flask.g) for each test."""
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
def client(app, db_session):
    """Create test client."""
    return app.test_client()


def make_user(username: str, email: str, role: str):
    return auth_service.create_user(
        username=username,
        email=email,
        password=DEFAULT_PASSWORD,
        role=role,
    )


@pytest.fixture(scope='function')
def admin_user(db_session):
    return make_user("admin", "admin@stockroom.com", ROLE_ADMIN)


@pytest.fixture(scope='function')
def regular_user(db_session):
    return make_user("staff", "staff@stockroom.com", ROLE_USER)


@pytest.fixture(scope='function')
def counter_user(db_session):
    return make_user("counter", "counter@stockroom.com", ROLE_COUNTER)


@pytest.fixture(scope='function')
def admin_claims(admin_user):
    return auth_service.claims_for(admin_user)


@pytest.fixture(scope='function')
def user_claims(regular_user):
    return auth_service.claims_for(regular_user)


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(admin_claims):
    return auth_headers(token_service.issue_token(admin_claims))


@pytest.fixture(scope='function')
def user_headers(user_claims):
    return auth_headers(token_service.issue_token(user_claims))


@pytest.fixture(scope='function')
def counter_headers(counter_user):
    return auth_headers(token_service.issue_token(auth_service.claims_for(counter_user)))


@pytest.fixture(scope='function')
def sample_record(client, admin_headers):
    """A fully populated record created through the API as admin."""
    resp = client.post("/inventory", json={
        "delivery_date": "2026-03-04",
        "delivery_no": "D-1",
        "supplier_name": "Acme",
        "delivery_details": "Pallet 3",
        "stockman": "Joe",
        "item_description": "Blue Widget",
        "item_code": "ABC123",
        "color": "blue",
        "qty": 10,
        "storage": "Rack A",
        "counted_by": "Ann",
        "date_counted": "2026-03-05",
    }, headers=admin_headers)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def record_count() -> int:
    return db.session.query(InventoryRecord).count()
