"""Unit testing configuration"""

from uuid import uuid4

import httpx
import pytest

from firebase_rest.auth import ApiClient as AuthApiClient
from firebase_rest.database import ApiClient, Database, Reference
from tests.fakes import FakeAuthBackend, FakeRealtimeDatabase

DATABASE_URL = "https://test-project.firebaseio.com"
AUTH_URL = "https://www.googleapis.com/identitytoolkit/v3/relyingparty"


@pytest.fixture
def fake_db() -> FakeRealtimeDatabase:
    return FakeRealtimeDatabase()


@pytest.fixture
def database(fake_db: FakeRealtimeDatabase):
    http_client = httpx.Client(transport=httpx.MockTransport(fake_db))
    with Database(ApiClient(DATABASE_URL, http_client=http_client)) as db:
        yield db
    http_client.close()


@pytest.fixture
def ref(database: Database) -> Reference:
    """
    Reference to a fresh, randomly named node, so every test works in its
    own namespace.
    """
    return database.get_reference(f"tests/{uuid4().hex}")


@pytest.fixture
def fake_auth() -> FakeAuthBackend:
    return FakeAuthBackend()


@pytest.fixture
def auth_client(fake_auth: FakeAuthBackend):
    http_client = httpx.Client(transport=httpx.MockTransport(fake_auth))
    client = AuthApiClient(
        api_key="test-api-key", http_client=http_client, base_url=AUTH_URL
    )
    yield client
    http_client.close()
