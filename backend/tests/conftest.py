"""
Pytest fixtures for mallpos backend tests.

Provides an in-memory database, a per-test clean slate, the test client
and a few ledger fixtures (vendor, product).
"""

import pytest

from mallpos import create_app
from mallpos.extensions import db
from mallpos.models import Product, Vendor


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'LOG_LEVEL': 'WARNING',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
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


@pytest.fixture(scope='function')
def vendor(db_session):
    """A vendor with no purchases or payments."""
    v = Vendor(name="Fresh Farms", phone="9876543210", payment_terms_days=30)
    db_session.add(v)
    db_session.commit()
    return v


@pytest.fixture(scope='function')
def other_vendor(db_session):
    v = Vendor(name="City Wholesale", email="orders@citywholesale.test", payment_terms_days=15)
    db_session.add(v)
    db_session.commit()
    return v


@pytest.fixture(scope='function')
def product(db_session):
    """Product with a 5-digit item code, so variable-weight scans resolve to it."""
    p = Product(name="Basmati Rice 1kg", barcode="12345", price_cents=2000, wholesale_price_cents=1500, stock=10)
    db_session.add(p)
    db_session.commit()
    return p


def record_purchase(client, vendor_id, product_id, quantity, price, path='/api/vendors-purchases'):
    """Helper to post a purchase and return the response."""
    return client.post(path, json={
        'vendor_id': vendor_id,
        'product_id': product_id,
        'quantity': quantity,
        'price': price,
    })


def record_payment(client, vendor_id, amount, **extra):
    """Helper to post a vendor payment and return the response."""
    return client.post(f'/api/vendors/{vendor_id}/payments', json={'amount': amount, **extra})


def get_balance(client, vendor_id) -> dict:
    resp = client.get(f'/api/vendors/{vendor_id}/balance')
    assert resp.status_code == 200
    return resp.get_json()
