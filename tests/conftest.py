from contextlib import ExitStack

import pytest
from fastapi.testclient import TestClient

from classroom_api.config import Settings
from classroom_api.db import UserStore
from classroom_api.main import create_app

BEARER_TOKEN = "test-classroom-api-secret"


@pytest.fixture
def database_path(tmp_path):
    return tmp_path / "classroom.db"


@pytest.fixture
def store(database_path):
    store = UserStore(database_path)
    store.init_db()
    return store


@pytest.fixture
def make_client(database_path):
    """Build a client for an app configured with the given bearer secret."""
    with ExitStack() as stack:

        def _make(secret: str | None = BEARER_TOKEN) -> TestClient:
            app = create_app(Settings(tpa_api_bearer_token=secret, database_path=database_path))
            return stack.enter_context(TestClient(app))

        yield _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def auth_headers():
    return {"authorization": f"Bearer {BEARER_TOKEN}"}
