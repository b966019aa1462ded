"""
Pressroom Backend: Signup / Login Endpoint Tests
================================================

What we test:
    ✅ Signup → login returns a token whose identity is the new user
    ✅ Duplicate username → 409
    ✅ Missing or blank fields → 400
    ✅ Unknown user → 404, wrong password → 401
    ✅ Protected route without token → 401, with a bad token → 403
"""

import uuid

import pytest


class TestSignup:

    @pytest.mark.asyncio
    async def test_signup_then_login_identity_matches(self, test_client, app):
        signup = await test_client.post("/signup", json={"username": "a", "password": "x"})
        assert signup.status_code == 201
        created = signup.json()
        assert created["username"] == "a"

        login = await test_client.post("/login", json={"username": "a", "password": "x"})
        assert login.status_code == 200

        identity = app.state.token_service.verify(login.json()["token"])
        assert identity.user_id == uuid.UUID(created["id"])
        assert identity.username == "a"

    @pytest.mark.asyncio
    async def test_duplicate_username_conflict(self, test_client):
        first = await test_client.post("/signup", json={"username": "a", "password": "x"})
        second = await test_client.post("/signup", json={"username": "a", "password": "y"})

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"] == "conflict"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"username": "a"},
            {"password": "x"},
            {"username": "", "password": "x"},
            {"username": "a", "password": ""},
            {},
        ],
    )
    async def test_missing_fields_rejected(self, test_client, body):
        response = await test_client.post("/signup", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_password_is_not_stored_in_plain_text(self, test_client, session_factory):
        from sqlalchemy import select

        from pressroom.models.user import User

        await test_client.post("/signup", json={"username": "carol", "password": "hunter2"})
        async with session_factory() as session:
            user = (await session.execute(select(User).where(User.username == "carol"))).scalar_one()

        assert user.password_hash != "hunter2"
        assert user.password_hash.startswith("$2")


class TestLogin:

    @pytest.mark.asyncio
    async def test_unknown_user_not_found(self, test_client):
        response = await test_client.post("/login", json={"username": "ghost", "password": "x"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_wrong_password_unauthorized(self, test_client):
        await test_client.post("/signup", json={"username": "a", "password": "x"})
        response = await test_client.post("/login", json={"username": "a", "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid password"

    @pytest.mark.asyncio
    async def test_missing_password_bad_request(self, test_client):
        response = await test_client.post("/login", json={"username": "a"})
        assert response.status_code == 400


class TestBearerGate:

    @pytest.mark.asyncio
    async def test_no_token_is_401(self, test_client):
        response = await test_client.post("/posts", json={"title": "t", "content": "c"})
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_bad_token_is_403(self, test_client):
        response = await test_client.post(
            "/posts",
            json={"title": "t", "content": "c"},
            headers={"Authorization": "Bearer not-a-valid-token"},
        )
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    @pytest.mark.asyncio
    async def test_auth_checked_before_body(self, test_client):
        response = await test_client.post("/posts", json={})
        assert response.status_code == 401
