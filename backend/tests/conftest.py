"""
Pytest fixtures for shoppos backend tests.

Provides test database setup, users with session tokens, products, and test client.
"""

import pytest

from shoppos import create_app
from shoppos.extensions import db
from shoppos.models import Product, User, ROLE_ADMIN, ROLE_CASHIER
from shoppos.money import to_cents
from shoppos.services import session_service
from shoppos.services.auth_service import hash_password

PASSWORD = "Password123!"

# bcrypt at cost 12 is slow; hash once per run
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
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


def make_user(db_session, username: str, role: str) -> User:
    user = User(username=username, password_hash=PASSWORD_HASH, role=role)
    db_session.add(user)
    db_session.commit()
    return user


def make_product(db_session, name: str, price: str, stock: int, category: str = "Other") -> Product:
    product = Product(name=name, price_cents=to_cents(price), stock_quantity=stock, category=category)
    db_session.add(product)
    db_session.commit()
    return product


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def fresh(db_session, model, pk):
    """Re-read a row from the database, bypassing the identity map."""
    db_session.expire_all()
    return db_session.get(model, pk)


@pytest.fixture(scope='function')
def admin_user(db_session):
    return make_user(db_session, "admin", ROLE_ADMIN)


@pytest.fixture(scope='function')
def cashier_user(db_session):
    return make_user(db_session, "cashier", ROLE_CASHIER)


@pytest.fixture(scope='function')
def other_cashier(db_session):
    return make_user(db_session, "cashier2", ROLE_CASHIER)


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    _, token = session_service.create_session(admin_user)
    return auth_headers(token)


@pytest.fixture(scope='function')
def cashier_headers(cashier_user):
    _, token = session_service.create_session(cashier_user)
    return auth_headers(token)


@pytest.fixture(scope='function')
def other_cashier_headers(other_cashier):
    _, token = session_service.create_session(other_cashier)
    return auth_headers(token)


@pytest.fixture(scope='function')
def milk(db_session):
    """Product{price=1.50, stock=10}."""
    return make_product(db_session, "Milk", "1.50", 10, "Dairy")


@pytest.fixture(scope='function')
def bread(db_session):
    return make_product(db_session, "Bread", "2.25", 5, "Bakery")
