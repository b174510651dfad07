"""
API tests for the session, registration and email verification endpoints.
"""

import pytest

from homedirect.config import settings


REGISTRATION = {
    "username": "ivan",
    "email": "ivan@example.com",
    "password": "securepassword123",
    "firstName": "Ivan",
    "lastName": "Petrov",
    "phoneNumber": "+7 900 000 00 00",
}


class TestSessionEndpoints:
    """Test /api/user, /api/login, /api/admin/login and /api/logout."""

    @pytest.mark.asyncio
    async def test_current_user_without_session(self, async_client):
        """Test the session probe answers 401 with the error envelope."""
        response = await async_client.get("/api/user")

        assert response.status_code == 401
        error = response.json()["error"]
        assert error["code"] == "UNAUTHORIZED"
        assert error["message"] == "Authentication required"
        assert error["request_id"]
        assert error["timestamp"]

    @pytest.mark.asyncio
    async def test_login_sets_session_cookie(self, async_client, test_user):
        response = await async_client.post(
            "/api/login",
            json={"username": "owner", "password": "testpassword123"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == test_user.id
        assert data["firstName"] == "Olga"
        assert data["isVerified"] is True
        assert "hashedPassword" not in data

        set_cookie = response.headers["set-cookie"]
        assert settings.session_cookie_name in set_cookie
        assert "HttpOnly" in set_cookie

        me = await async_client.get("/api/user")
        assert me.status_code == 200
        assert me.json()["username"] == "owner"

    @pytest.mark.asyncio
    async def test_login_with_wrong_password(self, async_client, test_user):
        response = await async_client.post(
            "/api/login",
            json={"username": "owner", "password": "wrongpassword"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"
        assert settings.session_cookie_name not in async_client.cookies

    @pytest.mark.asyncio
    async def test_login_validation_error(self, async_client):
        response = await async_client.post("/api/login", json={"username": "owner"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_bearer_token_is_accepted(self, async_client, auth_service, test_user):
        token = auth_service.create_session(test_user)

        response = await async_client.get("/api/user", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["id"] == test_user.id

    @pytest.mark.asyncio
    async def test_tampered_cookie_is_rejected(self, async_client):
        async_client.cookies.set(settings.session_cookie_name, "garbage")

        response = await async_client.get("/api/user")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_login(self, async_client, test_admin):
        response = await async_client.post(
            "/api/admin/login",
            json={"username": "admin", "password": "testpassword123"}
        )

        assert response.status_code == 200
        assert response.json()["isAdmin"] is True

    @pytest.mark.asyncio
    async def test_admin_login_rejects_regular_user(self, async_client, test_user):
        response = await async_client.post(
            "/api/admin/login",
            json={"username": "owner", "password": "testpassword123"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid admin credentials"

    @pytest.mark.asyncio
    async def test_logout_ends_session(self, user_client):
        assert (await user_client.get("/api/user")).status_code == 200

        response = await user_client.post("/api/logout")

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}
        assert (await user_client.get("/api/user")).status_code == 401

    @pytest.mark.asyncio
    async def test_logout_without_session(self, async_client):
        response = await async_client.post("/api/logout")

        assert response.status_code == 200


class TestRegistrationEndpoints:
    """Test /api/register and the verification endpoints."""

    @pytest.mark.asyncio
    async def test_register_starts_unverified_session(self, async_client, mail_outbox):
        """Test registration returns the new user and logs them in."""
        response = await async_client.post("/api/register", json=REGISTRATION)

        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "ivan"
        assert data["isVerified"] is False
        assert data["isAdmin"] is False
        assert data["phoneNumber"] == "+7 900 000 00 00"
        assert "verificationCode" not in data

        assert len(mail_outbox) == 1
        assert mail_outbox[0]["email"] == "ivan@example.com"

        me = await async_client.get("/api/user")
        assert me.status_code == 200
        assert me.json()["username"] == "ivan"

    @pytest.mark.asyncio
    async def test_register_duplicate(self, async_client, mail_outbox, test_user):
        response = await async_client.post(
            "/api/register",
            json={**REGISTRATION, "username": "owner"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"
        assert mail_outbox == []

    @pytest.mark.asyncio
    async def test_register_rejects_short_password(self, async_client, mail_outbox):
        response = await async_client.post(
            "/api/register",
            json={**REGISTRATION, "password": "short"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_register_then_verify(self, async_client, mail_outbox, stored_verification_code):
        """Test the full registration and verification flow."""
        await async_client.post("/api/register", json=REGISTRATION)
        code = mail_outbox[0]["code"]
        assert await stored_verification_code("ivan@example.com") == code

        response = await async_client.post(
            "/api/verify-email",
            json={"email": "ivan@example.com", "code": code}
        )

        assert response.status_code == 200
        assert response.json()["isVerified"] is True
        assert await stored_verification_code("ivan@example.com") is None

        me = await async_client.get("/api/user")
        assert me.json()["isVerified"] is True

    @pytest.mark.asyncio
    async def test_verify_with_wrong_code(self, async_client, mail_outbox):
        await async_client.post("/api/register", json=REGISTRATION)
        code = mail_outbox[0]["code"]
        wrong = "000000" if code != "000000" else "111111"

        response = await async_client.post(
            "/api/verify-email",
            json={"email": "ivan@example.com", "code": wrong}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VERIFICATION_FAILED"

    @pytest.mark.asyncio
    async def test_verify_with_non_ascii_digits(self, async_client, mail_outbox, stored_verification_code):
        """Arabic-Indic digits are a wrong code, not a server error."""
        await async_client.post("/api/register", json=REGISTRATION)

        response = await async_client.post(
            "/api/verify-email",
            json={"email": "ivan@example.com", "code": "١٢٣٤٥٦"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VERIFICATION_FAILED"
        assert await stored_verification_code("ivan@example.com") == mail_outbox[0]["code"]

    @pytest.mark.asyncio
    async def test_verify_already_verified(self, async_client, test_user):
        response = await async_client.post(
            "/api/verify-email",
            json={"email": "owner@test.com", "code": "123456"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "ALREADY_VERIFIED"

    @pytest.mark.asyncio
    async def test_verify_unknown_email(self, async_client):
        response = await async_client.post(
            "/api/verify-email",
            json={"email": "ghost@test.com", "code": "123456"}
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/request-verification", "/api/resend-verification"])
    async def test_request_new_code(self, async_client, mail_outbox, test_unverified_user, stored_verification_code, path):
        response = await async_client.post(path, json={"email": "newbie@test.com"})

        assert response.status_code == 200
        assert response.json() == {"message": "Verification email sent"}
        assert len(mail_outbox) == 1
        assert await stored_verification_code("newbie@test.com") == mail_outbox[0]["code"]

    @pytest.mark.asyncio
    async def test_request_code_for_verified_user(self, async_client, mail_outbox, test_user):
        response = await async_client.post(
            "/api/request-verification",
            json={"email": "owner@test.com"}
        )

        assert response.status_code == 400
        assert mail_outbox == []
