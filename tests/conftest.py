import os

# settings are read once and cached, so the environment must be ready before any app import
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["COOKIE_SECRET"] = "test-cookie-secret"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"

import pytest
from fastapi.testclient import TestClient

from quantumbot.api.deps import get_completion_gateway
from quantumbot.core.errors import UpstreamError
from quantumbot.db.session import Base, SessionLocal, engine
from quantumbot import models  # noqa: F401


class FakeGateway:
    """Stands in for Gemini: records every history it gets, replies from a script."""

    def __init__(self):
        self.replies = []
        self.error = None
        self.calls = []

    def complete(self, messages, model=None):
        self.calls.append([dict(m) for m in messages])
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return "ok"


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def app(gateway):
    from main import app

    app.dependency_overrides[get_completion_gateway] = lambda: gateway
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def make_client(app):
    clients = []

    def _make():
        c = TestClient(app)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def client(make_client):
    return make_client()


def _signup(client, name="Ann", email="ann@x.com", password="pw123"):
    return client.post("/api/user/signup", json={"name": name, "email": email, "password": password})


@pytest.fixture
def signup():
    return _signup


@pytest.fixture
def ann(client):
    assert _signup(client).status_code == 201
    return client


@pytest.fixture
def upstream_down(gateway):
    gateway.error = UpstreamError("model overloaded")
    return gateway
