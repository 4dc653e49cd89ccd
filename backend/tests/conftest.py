"""
Pytest fixtures for stationary backend tests.

Provides the test app with an in-memory database, a clean database per test,
accounts for each role, and a small seeded data set.
"""

from datetime import date

import pytest

from stationary import create_app
from stationary.extensions import db
from stationary.permissions import ROLE_ADMIN, ROLE_ASSISTANT, ROLE_GUEST
from stationary.records import Actor, DataSet, Employee, InventoryItem
from stationary.services import auth_service, storage_service


ADMIN_PASSWORD = "Adm1n!pass"
ASSISTANT_PASSWORD = "Ass1st!pass"
GUEST_PASSWORD = "Gu3st!pass"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def runner(app):
    """Create CLI test runner."""
    return app.test_cli_runner()


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


# =============================================================================
# ACCOUNTS
# =============================================================================

@pytest.fixture(scope='function')
def admin_account(db_session):
    return auth_service.create_user(ROLE_ADMIN, "Office Admin", "admin", ADMIN_PASSWORD)


@pytest.fixture(scope='function')
def assistant_account(db_session):
    return auth_service.create_user(ROLE_ASSISTANT, "Desk Assistant", "assist", ASSISTANT_PASSWORD)


@pytest.fixture(scope='function')
def guest_account(db_session):
    return auth_service.create_user(ROLE_GUEST, "Visiting Guest", "guest", GUEST_PASSWORD)


@pytest.fixture
def admin_actor():
    return Actor(role=ROLE_ADMIN, name="Office Admin", employee_id="admin")


# =============================================================================
# DATA
# =============================================================================

@pytest.fixture
def pens():
    return InventoryItem(id="pen", name="Blue Pen", category="Writing", stock_quantity=50, unit="pcs", threshold=10)


@pytest.fixture
def paper():
    return InventoryItem(id="paper", name="A4 Paper", category="Paper", stock_quantity=20, unit="ream", threshold=5)


@pytest.fixture
def inventory(pens, paper):
    return [pens, paper]


@pytest.fixture
def employees():
    return [
        Employee(id="E1", name="Sam Lee", department="Finance"),
        Employee(id="E2", name="Jo Park", department="Operations"),
    ]


@pytest.fixture
def issue_day():
    return date(2026, 3, 2)


@pytest.fixture(scope='function')
def seeded(db_session, inventory, employees):
    """Store a small data set and return it."""
    data_set = DataSet(
        inventory=tuple(inventory),
        issues=(),
        employees=tuple(employees),
        categories=("Writing", "Paper"),
    )
    storage_service.save_data_set(data_set)
    return data_set
