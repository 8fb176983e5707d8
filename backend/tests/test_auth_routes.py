"""
Murmur Backend — Auth & Session Endpoint Tests
================================================

What we test:
    ✅ Register sets the session cookie and hides the password hash
    ✅ Duplicate email / username conflict without creating a second row
    ✅ Request validation errors are 400 with the standard error body
    ✅ Login failures share one generic message
    ✅ Logout expires the cookie
    ✅ Missing / invalid / expired tokens → 401 (expired also clears the cookie)
    ✅ Valid token for a deleted user → 404
    ✅ Bearer header accepted when no cookie is present
"""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from murmur.models.user import User
from murmur.security import create_access_token


async def _count_users(db_engine) -> int:
    factory = async_sessionmaker(db_engine, class_=AsyncSession)
    async with factory() as session:
        return (await session.execute(select(func.count()).select_from(User))).scalar_one()


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_profile_and_sets_cookie(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={
                "fullName": "Alice Liddell",
                "username": "alice",
                "email": "Alice@Example.com",
                "password": "secret123",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["username"] == "alice"
        assert body["fullName"] == "Alice Liddell"
        assert body["email"] == "alice@example.com"
        assert "password" not in body and "passwordHash" not in body

        set_cookie = response.headers["set-cookie"].lower()
        assert set_cookie.startswith("token=")
        assert "httponly" in set_cookie
        assert "samesite=strict" in set_cookie
        assert "max-age=1296000" in set_cookie  # 15 days

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, test_client, register, db_engine):
        await register(test_client, "alice")

        response = await test_client.post(
            "/api/auth/register",
            json={
                "fullName": "Other",
                "username": "someone_else",
                "email": "alice@example.com",
                "password": "secret123",
            },
        )

        assert response.status_code == 400
        assert response.json()["error"] == "conflict"
        assert await _count_users(db_engine) == 1

    @pytest.mark.asyncio
    async def test_duplicate_username_conflicts(self, test_client, register):
        await register(test_client, "alice")

        response = await test_client.post(
            "/api/auth/register",
            json={
                "fullName": "Other",
                "username": "alice",
                "email": "different@example.com",
                "password": "secret123",
            },
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "username"

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={"fullName": "Bob", "username": "bob", "email": "bob@example.com", "password": "123"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert "request_id" in body

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={"fullName": "Bob", "username": "bob", "email": "not-an-email", "password": "secret123"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_field_rejected(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={"username": "bob", "email": "bob@example.com", "password": "secret123"},
        )
        assert response.status_code == 400


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success_sets_cookie(self, test_client, register):
        await register(test_client, "alice")
        test_client.cookies.clear()

        response = await test_client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "secret123"},
        )

        assert response.status_code == 200
        assert response.json()["username"] == "alice"
        assert test_client.cookies.get("token")

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, test_client, register):
        await register(test_client, "alice")

        wrong_password = await test_client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "nope-nope"},
        )
        unknown_email = await test_client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": "secret123"},
        )

        assert wrong_password.status_code == unknown_email.status_code == 400
        assert wrong_password.json()["message"] == unknown_email.json()["message"]
        assert wrong_password.json()["message"] == "Invalid email or password"


class TestSession:

    @pytest.mark.asyncio
    async def test_no_token_is_401(self, test_client):
        response = await test_client.get("/api/secured/user/me")
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_garbage_token_is_401(self, test_client):
        test_client.cookies.set("token", "garbage")
        response = await test_client.get("/api/secured/user/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token_is_401_and_clears_cookie(self, test_client, register):
        alice = await register(test_client, "alice")
        expired = create_access_token(uuid.UUID(alice["id"]), expires_delta=timedelta(seconds=-5))
        test_client.cookies.clear()
        test_client.cookies.set("token", expired)

        response = await test_client.get("/api/secured/user/me")

        assert response.status_code == 401
        set_cookie = response.headers["set-cookie"].lower()
        assert set_cookie.startswith("token=")
        assert "max-age=0" in set_cookie

    @pytest.mark.asyncio
    async def test_token_for_unknown_user_is_404(self, test_client):
        test_client.cookies.set("token", create_access_token(uuid.uuid4()))
        response = await test_client.get("/api/secured/user/me")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_bearer_header_accepted(self, test_client, register):
        alice = await register(test_client, "alice")
        test_client.cookies.clear()

        response = await test_client.get(
            "/api/secured/user/me",
            headers={"Authorization": f"Bearer {create_access_token(uuid.UUID(alice['id']))}"},
        )

        assert response.status_code == 200
        assert response.json()["id"] == alice["id"]

    @pytest.mark.asyncio
    async def test_logout_expires_cookie(self, test_client, register):
        await register(test_client, "alice")

        response = await test_client.post("/api/secured/logout")

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}
        assert "max-age=0" in response.headers["set-cookie"].lower()
        assert not test_client.cookies.get("token")

        after = await test_client.get("/api/secured/user/me")
        assert after.status_code == 401
