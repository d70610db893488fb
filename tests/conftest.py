import pytest
from fastapi.testclient import TestClient

from pet_rescue_api.app.core.config import settings
from pet_rescue_api.app.core.db import init_db
from pet_rescue_api.app.main import app

from .factories import PASSWORD


@pytest.fixture(autouse=True)
def test_db(tmp_path, monkeypatch):
    """
    Points the application at a fresh SQLite file for every test.
    """
    db_path = tmp_path / "pet_rescue_test.db"
    monkeypatch.setattr(settings, "database_url", str(db_path))
    init_db()
    return db_path


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client):
    """TestClient signed in to /admin as a freshly registered administrator."""
    response = client.post(
        "/admin/register",
        json={"email": "admin@example.com", "password": PASSWORD, "confirmPassword": PASSWORD},
    )
    assert response.status_code == 201
    return client


@pytest.fixture
def api_token(client):
    """Bearer token of a signed-up user (which also owns a client profile)."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "jane@example.com", "password": PASSWORD, "confirmPassword": PASSWORD},
    )
    assert response.status_code == 200
    return response.json()["access_token"]


@pytest.fixture
def auth_headers(api_token):
    return {"Authorization": f"Bearer {api_token}"}

