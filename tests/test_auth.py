"""Tests for the auth endpoints and bearer token checks."""
from datetime import timedelta

import pytest

from app.application.services.auth_service import create_access_token


def test_register_user(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Jane Doe", "email": "Jane@Example.com", "password": "secret123"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User registered successfully"
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["user"]["email"] == "jane@example.com"
    assert data["user"]["role"] == "viewer"
    assert "password_hash" not in data["user"]


def test_register_duplicate_email(client, register_user):
    register_user(email="dup@example.com")

    response = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "DUP@example.com", "password": "secret123"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Email already registered"


@pytest.mark.parametrize("role", ["admin", "manager"])
def test_register_cannot_choose_elevated_role(client, role):
    response = client.post(
        "/api/auth/register",
        json={"name": "Mallory", "email": "mallory@example.com", "password": "secret123", "role": role},
    )

    assert response.status_code == 400
    login = client.post("/api/auth/login", json={"email": "mallory@example.com", "password": "secret123"})
    assert login.status_code == 401


def test_register_short_password(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Jane", "email": "jane@example.com", "password": "123"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "ValidationException"


def test_login_success(client, register_user):
    register_user(email="login@example.com", password="secret123")

    response = client.post("/api/auth/login", json={"email": "login@example.com", "password": "secret123"})

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["user"]["last_login"] is not None


def test_login_wrong_password(client, register_user):
    register_user(email="login@example.com", password="secret123")

    response = client.post("/api/auth/login", json={"email": "login@example.com", "password": "wrong-one"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid email or password"


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})

    assert response.status_code == 401


def test_me(client, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["email"] == "manager@example.com"
    assert response.json()["role"] == "viewer"


def test_me_without_token(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Access token required"
    assert response.headers["www-authenticate"] == "Bearer"


def test_me_with_expired_token(client, register_user):
    user = register_user()["user"]
    token = create_access_token(
        {"sub": user["email"], "uid": user["id"], "role": user["role"]},
        expires_delta=timedelta(minutes=-1),
    )

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid token"


def test_me_with_token_for_unknown_user(client):
    token = create_access_token({"sub": "nobody@example.com", "uid": 999, "role": "admin"})

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid token"
