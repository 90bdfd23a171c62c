"""
Pytest fixtures for stockroom backend tests.

Provides an application on an in-memory store, temporary session/theme files,
a test client and a few catalog helpers.
"""

import pytest

from stockroom import create_app
from stockroom.extensions import db
from stockroom.services import products_service
from stockroom.services.concurrency import atomic


ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse"


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing (schema and administrator provisioned)."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SESSION_FILE': str(tmp_path / 'session.json'),
        'THEME_CONFIG_FILE': str(tmp_path / 'config.json'),
        'ADMIN_USERNAME': ADMIN_USERNAME,
        'ADMIN_PASSWORD': ADMIN_PASSWORD,
        'BCRYPT_ROUNDS': 4,
        'DISPLAY_LANGUAGE': 'fr',
        'CURRENCY_LABEL': 'TND',
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def make_product(app):
    """Factory: add a product through the service and return its id."""
    def _make(name="Chair", price_cents=5000, cost_price_cents=2000, quantity=10,
              brand="Atelier", material="Oak", image=None):
        return products_service.add_product(patch={
            "name": name,
            "price_cents": price_cents,
            "cost_price_cents": cost_price_cents,
            "quantity": quantity,
            "brand": brand,
            "material": material,
            "image": image,
        })
    return _make


@pytest.fixture(scope='function')
def chair(make_product):
    """Chair: price 50.00, cost 20.00, 10 in stock."""
    return make_product()


@pytest.fixture(scope='function')
def backdate(app):
    """Overwrite timestamp columns on a stored row (reports filter on them)."""
    def _backdate(model, row_id, **fields):
        with atomic():
            row = db.session.get(model, row_id)
            for key, value in fields.items():
                setattr(row, key, value)
    return _backdate


def login(client, username: str = ADMIN_USERNAME, password: str = ADMIN_PASSWORD):
    """Helper to sign in through the API."""
    return client.post('/api/auth/login', json={
        'username': username,
        'password': password,
    })


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
