import os

# Must be set before the app (and its cached settings/engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_EMAIL"] = ""
os.environ["ADMIN_PASSWORD"] = ""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.infrastructure.database import Base, engine, SessionLocal


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    app.state.rate_limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(client):
    """Database session for direct access in tests."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def register_user(client):
    def _register(email="manager@example.com", password="secret123", name="Stock Manager", role="viewer"):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password, "role": role},
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _register


@pytest.fixture
def auth_headers(register_user):
    token = register_user()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def create_product(client, auth_headers):
    """Factory creating a product through the API and returning its JSON."""
    def _create(**fields):
        payload = {"name": "Widget", "quantity": 3, "threshold": 5, "category": "Tools"}
        payload.update(fields)
        response = client.post("/api/products", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["product"]
    return _create
