"""
Pytest configuration and fixtures for the Personal Finance API tests.

Every test gets a fresh app on its own SQLite file and a controllable clock
for the token codec.
"""
from datetime import datetime, timezone

import pytest

from api import create_app
from models.schemas.user import UserCreateSchema

from helpers import FakeClock, make_config, user_payload


@pytest.fixture
def clock():
    return FakeClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def app(tmp_path, clock):
    app = create_app("testing", config_overrides=make_config(tmp_path), clock=clock)
    yield app
    app.extensions["storage"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage(app):
    return app.extensions["storage"]


@pytest.fixture
def auth_service(app):
    return app.extensions["auth_service"]


@pytest.fixture
def user_service(app):
    return app.extensions["user_service"]


@pytest.fixture
def codec(auth_service):
    return auth_service.codec


@pytest.fixture
def registered(auth_service):
    """Register alice through the service and return the RegisterResult."""
    return auth_service.register(UserCreateSchema().load(user_payload()))


@pytest.fixture
def register_user(client):
    def _register(**overrides):
        resp = client.post("/api/v1/auth/register", json=user_payload(**overrides))
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _register


@pytest.fixture
def login(client):
    def _login(identifier="alice", password="pw123456789"):
        resp = client.post(
            "/api/v1/auth/login", json={"usernameOrEmail": identifier, "password": password}
        )
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()["data"]

    return _login
