import pytest

from api import create_app
from api.extensions import get_services
from models.brand import Brand
from models.category import Category
from models.db_storage import DBStorage
from tests.fakes import InMemoryObjectStorage

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass-123"
CUSTOMER_EMAIL = "customer@example.com"
CUSTOMER_PASSWORD = "customer-pass"


@pytest.fixture
def storage():
    """
    A fresh in-memory SQLite database per test.
    """
    db = DBStorage("sqlite://")
    db.reload()
    yield db
    db.drop_all()


@pytest.fixture
def object_storage():
    return InMemoryObjectStorage()


@pytest.fixture
def app(storage, object_storage):
    return create_app("testing", storage=storage, object_storage=object_storage)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    with app.app_context():
        yield get_services()


@pytest.fixture
def category(storage):
    c = Category(name="Áo thun", slug="ao-thun")
    storage.new(c)
    storage.save()
    return c


@pytest.fixture
def brand(storage):
    b = Brand(name="Local Brand", slug="local-brand")
    storage.new(b)
    storage.save()
    return b


def _bearer(client, email, password):
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['data']['access_token']}"}


@pytest.fixture
def admin_headers(app, client):
    with app.app_context():
        get_services().auth.register_admin(ADMIN_EMAIL, ADMIN_PASSWORD, "Store Admin")
    return _bearer(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def customer_headers(app, client):
    with app.app_context():
        get_services().auth.register(CUSTOMER_EMAIL, CUSTOMER_PASSWORD, "Jane Customer")
    return _bearer(client, CUSTOMER_EMAIL, CUSTOMER_PASSWORD)
