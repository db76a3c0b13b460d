"""
Pytest fixtures for shop backend tests.

Provides an in-memory shop context for service tests, and an app + test
client on in-memory SQLite for route and persistence tests. The recognition
service and the native barcode decoder are replaced by stubs.
"""

import pytest

from shopdesk import create_app
from shopdesk.extensions import db, shop
from shopdesk.services.barcode_service import DetectedBarcode
from shopdesk.services.images import CapturedImage
from shopdesk.services.persistence import PersistenceError
from shopdesk.services.store import ShopContext


TEST_PIN = "4321"

# 8-byte PNG signature; enough for code paths that never decode pixels
PNG_DATA_URL = "data:image/png;base64,iVBORw0KGgo="


class MemoryPersistence:
    """Collection persistence kept in a dict; can be told to fail saves."""

    def __init__(self, stored=None):
        self.stored = dict(stored or {})
        self.saves = []
        self.fail_saves = False
        # Number of successful saves allowed before every save fails
        self.fail_after = None

    def load(self, name):
        if name not in self.stored:
            return None
        return list(self.stored[name])

    def save(self, collections):
        if self.fail_saves or (self.fail_after is not None and len(self.saves) >= self.fail_after):
            raise PersistenceError("save failed")
        for name, records in collections.items():
            self.stored[name] = list(records)
        self.saves.append(sorted(collections))

    def describe(self):
        return [{"name": name, "record_count": len(records)} for name, records in sorted(self.stored.items())]


class StubRecognition:
    """Recognition client double recording which operations were called."""

    configured = True

    def __init__(self, invoice=None, guess=None, barcode=None, error=None):
        self.invoice = invoice
        self.guess = guess
        self.barcode = barcode
        self.error = error
        self.calls = []

    def _call(self, name, value):
        self.calls.append(name)
        if self.error is not None:
            raise self.error
        return value

    def analyze_invoice(self, image):
        return self._call("analyze_invoice", self.invoice)

    def identify_product(self, image):
        return self._call("identify_product", self.guess)

    def read_barcode(self, image):
        return self._call("read_barcode", self.barcode)


class StubDetector:
    def __init__(self, values=(), error=None):
        self.values = list(values)
        self.error = error
        self.calls = 0

    def detect(self, image):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [DetectedBarcode(format="ean_13", raw_value=v) for v in self.values]


@pytest.fixture
def persistence():
    return MemoryPersistence()


@pytest.fixture
def context(persistence):
    """Seeded shop context without Flask or a database."""
    ctx = ShopContext(persistence)
    ctx.load()
    return ctx


@pytest.fixture
def image():
    return CapturedImage.from_data_url(PNG_DATA_URL)


@pytest.fixture
def recognition():
    return StubRecognition()


@pytest.fixture
def app(recognition):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'OPERATOR_PIN': TEST_PIN,
        'OPERATOR_PIN_HASH': None,
        'PIN_HASH_ROUNDS': 4,
        'NATIVE_BARCODE_DETECTION': False,
        'RECOGNITION_API_KEY': None,
    })
    app.extensions["recognition"] = recognition

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def shop_context(app):
    return shop.context


@pytest.fixture
def headers(client):
    """Authorization headers for an operator session."""
    response = client.post('/api/auth/pin', json={'pin': TEST_PIN})
    assert response.status_code == 200
    return auth_headers(response.json['token'])


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
