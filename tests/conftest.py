import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from user_account_svc.app import create_app
from user_account_svc.config import Settings
from user_account_svc.store import UserStore

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


@pytest.fixture
def settings():
    # Low bcrypt cost keeps the suite fast; the service default is 10.
    return Settings(_env_file=None, secret_key=TEST_SECRET, mongo_db_name="test_db", bcrypt_rounds=4)


@pytest.fixture
def store(settings):
    return UserStore(settings.mongo_uri, settings.mongo_db_name, client=AsyncMongoMockClient())


@pytest_asyncio.fixture
async def initialized_store(store):
    await store.initialize()
    return store


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def register_user(client, name="Jhon", email="jhon@gmail.com", password="Jhon@123", **extra):
    """Register a user through the API and return its stored representation."""
    response = client.post("/register", json={"name": name, "email": email, "password": password, **extra})
    assert response.status_code == 201
    users = client.get("/users").json()
    return next(user for user in users if user["email"] == email)
