"""
Pytest fixtures for the shop backend tests.

Every test gets its own application on an in-memory SQLite database. The
feed consumer runs synchronously (drained at the start of each request) and
the inactivity watchdog thread is disabled.
"""

import pytest

from app import create_app
from models import db
from services.entities import CartItem, Product, Variation
from services.errors import GatewayError
from services.store import LocalStore
from services.workspace import EXTENSION_KEY

OPERATOR = {"username": "owner", "password": "chauhan123"}

TEST_CONFIG = {
    "TESTING": True,
    "SECRET_KEY": "test-secret",
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "OPERATOR_USERNAME": OPERATOR["username"],
    "OPERATOR_PASSWORD": OPERATOR["password"],
    "FEED_CONSUMER_THREAD": False,
    "INACTIVITY_POLL_SECONDS": 0,
    "INACTIVITY_LIMIT_SECONDS": 3600,
    "ROLLBACK_ON_WRITE_FAILURE": False,
    "SEED_DEMO_DATA": True,
    "LOG_LEVEL": "DEBUG",
}


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app(dict(TEST_CONFIG))
    yield app

    app.extensions[EXTENSION_KEY].close(reason="shutdown")
    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture(scope='function')
def workspace(app):
    return app.extensions[EXTENSION_KEY]


@pytest.fixture(scope='function')
def logged_in(client):
    """Client with the operator logged in and the demo catalog loaded."""
    response = client.post("/login", json=OPERATOR)
    assert response.status_code == 200
    return client


# ---------------- unit-test helpers ----------------
class FakeGateway:
    """
    Records every write. Set ``fail`` to make writes raise GatewayError;
    ``on_call`` is invoked with the method name before the write returns.
    """

    def __init__(self, categories=()):
        self.calls = []
        self.fail = False
        self.on_call = None
        self.categories = list(categories)

    def _record(self, name, *args):
        if self.on_call is not None:
            self.on_call(name)
        self.calls.append((name,) + args)
        if self.fail:
            raise GatewayError("backend unavailable")

    def fetch_categories(self):
        return list(self.categories)

    def add_product(self, product, variations=()):
        self._record("add_product", product, list(variations))

    def update_product(self, product):
        self._record("update_product", product)

    def add_variation(self, variation):
        self._record("add_variation", variation)

    def update_variation(self, variation):
        self._record("update_variation", variation)

    def create_bill(self, bill, updated_variations):
        self._record("create_bill", bill, list(updated_variations))

    def create_purchase(self, purchase, updated_variations):
        self._record("create_purchase", purchase, list(updated_variations))

    def add_category(self, name):
        self._record("add_category", name)
        if not self.fail:
            self.categories.append(name)

    def delete_category(self, name):
        self._record("delete_category", name)
        if not self.fail and name in self.categories:
            self.categories.remove(name)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def store():
    """A store holding one product with two variations."""
    store = LocalStore()
    store.load(
        products=[Product(id="p1", name="Steel Almirah", category="Almirahs")],
        variations=[
            Variation(id="v1", product_id="p1", name="Small", stock=10,
                      purchase_price=80.0, selling_price=100.0),
            Variation(id="v2", product_id="p1", name="Large", stock=5,
                      purchase_price=200.0, selling_price=250.0),
        ],
        categories=["Almirahs", "Beds"],
    )
    return store


def cart_item(variation_id, quantity, rate, product_id="p1"):
    return CartItem.snapshot(product_id, variation_id, "Steel Almirah", variation_id, quantity, rate)
