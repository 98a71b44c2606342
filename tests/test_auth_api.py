from datetime import timedelta

import pytest
from fastapi import status

from resume_matcher.services import auth as auth_service


def test_register_returns_token(client):
    response = client.post("/api/user/register", json={
        "email": "new.user@example.com",
        "password": "secret123",
        "firstName": "New",
        "lastName": "User",
    })
    assert response.status_code == status.HTTP_201_CREATED
    token = response.json()["token"]
    assert auth_service.decode_access_token(token)["sub"]


def test_register_existing_email(client, user):
    response = client.post("/api/user/register", json={
        "email": "Jane@Example.com",
        "password": "secret123",
        "firstName": "Jane",
        "lastName": "Doe",
    })
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "User already exists"


def test_register_missing_fields(client):
    response = client.post("/api/user/register", json={"email": "x@example.com", "password": "secret123"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    fields = {e["field"] for e in body["errors"]}
    assert {"firstName", "lastName"} <= fields


def test_register_short_password(client):
    response = client.post("/api/user/register", json={
        "email": "x@example.com", "password": "123", "firstName": "X", "lastName": "Y",
    })
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_login_success(client, user):
    """Test successful login with valid credentials."""
    response = client.post("/api/user/login", json={"email": "jane@example.com", "password": "secret123"})
    assert response.status_code == status.HTTP_200_OK
    payload = auth_service.decode_access_token(response.json()["token"])
    assert payload["sub"] == str(user.id)


def test_login_invalid_credentials(client, user):
    response = client.post("/api/user/login", json={"email": "jane@example.com", "password": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Invalid email or password"


@pytest.mark.parametrize("email", ["not-an-email", "nobody@example.com"])
def test_login_unknown_or_malformed_email(client, user, email):
    response = client.post("/api/user/login", json={"email": email, "password": "secret123"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Invalid email or password"


def test_login_missing_email(client):
    response = client.post("/api/user/login", json={"password": "secret123"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_me_requires_token(client):
    response = client.get("/api/user/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["success"] is False


def test_me_rejects_expired_token(client, user):
    token = auth_service.create_access_token(user.id, expires_delta=timedelta(minutes=-1))
    response = client.get("/api/user/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "TOKEN_EXPIRED"


def test_me_rejects_unknown_user(client, db_session):
    token = auth_service.create_access_token(9999)
    response = client.get("/api/user/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_returns_profile_without_matches(client, auth_headers):
    response = client.get("/api/user/me", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["email"] == "jane@example.com"
    assert data["firstName"] == "Jane"
    assert "hashedPassword" not in data
    assert data["stats"] == {"totalMatches": 0, "averageScore": 0, "lastMatchScore": 0}
