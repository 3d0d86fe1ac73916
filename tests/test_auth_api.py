"""HTTP tests for registration, login and profile."""

import pytest

from tests.utils import auth_headers, register_user


@pytest.mark.api
@pytest.mark.asyncio
async def test_register_returns_user_and_token(client):
    response = await client.post("/api/auth/register", json={
        "username": "alice",
        "email": "alice@example.com",
        "password": "secret123"
    })

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["username"] == "alice"
    assert body["user"]["email"] == "alice@example.com"
    assert "password_hash" not in body["user"]
    assert body["token"]


@pytest.mark.api
@pytest.mark.asyncio
async def test_register_rejects_duplicate_email_and_username(client):
    await register_user(client, "bob")

    same_email = await client.post("/api/auth/register", json={
        "username": "bobby",
        "email": "bob@example.com",
        "password": "secret123"
    })
    same_username = await client.post("/api/auth/register", json={
        "username": "bob",
        "email": "other@example.com",
        "password": "secret123"
    })

    assert same_email.status_code == 409
    assert same_username.status_code == 409


@pytest.mark.api
@pytest.mark.asyncio
async def test_register_validates_payload(client):
    response = await client.post("/api/auth/register", json={
        "username": "ab",
        "email": "not-an-email",
        "password": "123"
    })

    assert response.status_code == 422
    assert response.json()["detail"] == "Validation error"


@pytest.mark.api
@pytest.mark.asyncio
async def test_login(client):
    await register_user(client, "carol")

    response = await client.post("/api/auth/login", json={
        "email": "carol@example.com",
        "password": "secret123"
    })

    assert response.status_code == 200
    assert response.json()["user"]["username"] == "carol"
    assert response.json()["token"]


@pytest.mark.api
@pytest.mark.asyncio
@pytest.mark.parametrize("email,password", [
    ("dave@example.com", "wrong-password"),
    ("nobody@example.com", "secret123"),
])
async def test_login_with_bad_credentials(client, email, password):
    await register_user(client, "dave")

    response = await client.post("/api/auth/login", json={"email": email, "password": password})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


@pytest.mark.api
@pytest.mark.asyncio
async def test_profile(client):
    token, user = await register_user(client, "erin")

    response = await client.get("/api/auth/profile", headers=auth_headers(token))

    assert response.status_code == 200
    assert response.json()["id"] == user["id"]


@pytest.mark.api
@pytest.mark.asyncio
@pytest.mark.parametrize("headers,detail", [
    ({}, "Authorization header required"),
    ({"Authorization": "Token abc"}, "Invalid authorization header format"),
    ({"Authorization": "Bearer"}, "Invalid authorization header format"),
    ({"Authorization": "Bearer not-a-jwt"}, "Invalid or expired token"),
])
async def test_profile_requires_valid_token(client, headers, detail):
    response = await client.get("/api/auth/profile", headers=headers)

    assert response.status_code == 401
    assert response.json()["detail"] == detail
    assert response.headers["WWW-Authenticate"] == "Bearer"
