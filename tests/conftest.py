import pytest
from fastapi.testclient import TestClient

from finance_tracker.ai.loader import AILoader
from finance_tracker.config import settings
from finance_tracker.main import app


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def client(monkeypatch):
    # Memory store and heuristic advice only, whatever the environment says
    monkeypatch.setattr(settings, "DATABASE_URL", "")
    monkeypatch.setattr(settings, "GEMINI_API_KEY", None)
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    with TestClient(app) as c:
        yield c
    AILoader.gemini_model = None
    AILoader.openai_client = None


def register_and_login(client, email="ada@example.com", password="s3cret-pass", first="Ada", last="Lovelace"):
    r = client.post("/api/auth/register", json={
        "firstName": first, "lastName": last, "email": email, "password": password,
    })
    assert r.status_code == 201, r.text
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)
