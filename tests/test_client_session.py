"""
Tests for the client session store and the authentication session manager.
"""

import asyncio
import json
import pytest
import httpx

from homedirect.client.config import HomeDirectClientConfig
from homedirect.client.errors import (
    AuthenticationFailure,
    CodeFormatError,
    NetworkOrServerFailure,
    VerificationFailure
)
from homedirect.client.notifications import Notifier
from homedirect.client.session import (
    Anonymous,
    Authenticated,
    AuthSessionManager,
    Loading,
    SessionError,
    SessionStore
)
from homedirect.schemas.user import UserCreate


USER_JSON = {
    "id": 1,
    "username": "ivan",
    "email": "ivan@example.com",
    "firstName": "Ivan",
    "lastName": "Petrov",
    "isAdmin": False,
    "isVerified": True,
}


def mock_client(handler) -> httpx.AsyncClient:
    return HomeDirectClientConfig(base_url="http://test").create_http_client(
        transport=httpx.MockTransport(handler)
    )


class TestSessionStore:
    """Test the owned session slot."""

    def test_initial_state_is_loading(self):
        store = SessionStore()

        assert store.state == Loading()
        assert store.is_loading
        assert store.user is None
        assert store.version == 0

    def test_listeners_and_version(self):
        store = SessionStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store._write(Anonymous())
        unsubscribe()
        store._write(Loading())

        assert seen == [Anonymous()]
        assert store.version == 2


class TestAuthFlowAgainstApi:
    """Run the session manager against the application."""

    @pytest.fixture
    def notifier(self):
        return Notifier()

    @pytest.fixture
    def manager(self, async_client, notifier):
        return AuthSessionManager(async_client, notifier=notifier)

    @pytest.mark.asyncio
    async def test_anonymous_probe_is_silent(self, manager, notifier):
        """A 401 on the session probe means Anonymous, not an error."""
        state = await manager.check_session()

        assert state == Anonymous()
        assert manager.state == Anonymous()
        assert notifier.history == []

    @pytest.mark.asyncio
    async def test_register_then_verify(self, manager, notifier, mail_outbox):
        """Registration holds the unverified user; verification flips the flag."""
        user = await manager.register(UserCreate(
            username="ivan",
            email="ivan@example.com",
            password="securepassword123",
            first_name="Ivan",
            last_name="Petrov"
        ))

        assert isinstance(manager.state, Authenticated)
        assert user.is_verified is False
        assert manager.store.user.username == "ivan"
        assert notifier.last.title == "Registration successful"

        verified = await manager.verify_email("ivan@example.com", mail_outbox[0]["code"])

        assert verified.is_verified is True
        assert manager.store.user.is_verified is True
        assert manager.store.user.id == user.id
        assert notifier.last.title == "Email verified"

        # The session cookie from registration is still valid
        state = await manager.check_session()
        assert state.user.is_verified is True

    @pytest.mark.asyncio
    async def test_register_with_plain_mapping(self, manager, mail_outbox):
        user = await manager.register({
            "username": "petr",
            "email": "petr@example.com",
            "password": "securepassword123",
            "firstName": "Petr",
            "lastName": "Ivanov",
        })

        assert user.first_name == "Petr"

    @pytest.mark.asyncio
    async def test_register_duplicate(self, manager, notifier, mail_outbox, test_user):
        await manager.check_session()

        with pytest.raises(NetworkOrServerFailure) as exc_info:
            await manager.register({
                "username": "owner",
                "email": "new@example.com",
                "password": "securepassword123",
                "firstName": "A",
                "lastName": "B",
            })

        assert exc_info.value.status_code == 409
        assert exc_info.value.error_code == "CONFLICT"
        assert manager.state == Anonymous()
        assert notifier.last.title == "Registration failed"
        assert notifier.last.is_error

    @pytest.mark.asyncio
    async def test_verify_with_wrong_code(self, manager, notifier, mail_outbox):
        await manager.register({
            "username": "ivan",
            "email": "ivan@example.com",
            "password": "securepassword123",
            "firstName": "Ivan",
            "lastName": "Petrov",
        })
        before = manager.state
        code = mail_outbox[0]["code"]
        wrong = "000000" if code != "000000" else "111111"

        with pytest.raises(VerificationFailure, match="Invalid verification code"):
            await manager.verify_email("ivan@example.com", wrong)

        assert manager.state == before
        assert notifier.last.title == "Verification failed"

    @pytest.mark.asyncio
    async def test_login_and_logout(self, manager, notifier, test_user):
        user = await manager.login("owner", "testpassword123")

        assert user.id == test_user.id
        assert manager.store.is_authenticated
        assert notifier.last.description == "Welcome back, Olga!"

        await manager.logout()

        assert manager.state == Anonymous()
        assert notifier.last.title == "Logged out"
        assert await manager.check_session() == Anonymous()

    @pytest.mark.asyncio
    async def test_failed_login_leaves_state_unchanged(self, manager, notifier, test_user):
        await manager.check_session()

        with pytest.raises(AuthenticationFailure) as exc_info:
            await manager.login("owner", "wrongpassword")

        assert exc_info.value.status_code == 401
        assert manager.state == Anonymous()
        assert notifier.last.title == "Login failed"
        assert notifier.last.description == "Incorrect username or password"

    @pytest.mark.asyncio
    async def test_admin_login(self, manager, notifier, test_admin, test_user):
        with pytest.raises(AuthenticationFailure):
            await manager.admin_login("owner", "testpassword123")

        admin = await manager.admin_login("admin", "testpassword123")

        assert admin.is_admin is True
        assert notifier.last.title == "Admin login successful"

    @pytest.mark.asyncio
    async def test_request_verification(self, manager, notifier, mail_outbox, test_unverified_user):
        await manager.check_session()

        await manager.request_verification("newbie@test.com")
        await manager.resend_verification("newbie@test.com")

        assert len(mail_outbox) == 2
        assert manager.state == Anonymous()
        assert notifier.last.title == "Verification code sent"

    @pytest.mark.asyncio
    async def test_request_verification_for_unknown_email(self, manager, notifier):
        with pytest.raises(VerificationFailure):
            await manager.request_verification("ghost@test.com")

        assert notifier.last.title == "Failed to send verification code"


class TestAuthSessionManagerWithMockServer:
    """Failure handling and concurrency with a scripted server."""

    @pytest.mark.asyncio
    async def test_server_error_becomes_error_state(self):
        client = mock_client(lambda request: httpx.Response(500, json={"error": {"message": "Database down"}}))
        notifier = Notifier()
        manager = AuthSessionManager(client, notifier=notifier)

        state = await manager.check_session()

        assert isinstance(state, SessionError)
        assert state.error.message == "Database down"
        assert notifier.last.title == "Session check failed"
        assert notifier.last.is_error
        await client.aclose()

    @pytest.mark.asyncio
    async def test_unreachable_server(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = mock_client(handler)
        manager = AuthSessionManager(client)

        state = await manager.check_session()

        assert isinstance(state, SessionError)
        assert isinstance(state.error, NetworkOrServerFailure)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_logout_from_error_state(self):
        def handler(request):
            if request.url.path == "/api/logout":
                return httpx.Response(200, json={"message": "Logged out successfully"})
            return httpx.Response(502, text="Bad Gateway")

        client = mock_client(handler)
        manager = AuthSessionManager(client)
        await manager.check_session()
        assert isinstance(manager.state, SessionError)

        await manager.logout()

        assert manager.state == Anonymous()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_failed_logout_keeps_session(self):
        def handler(request):
            if request.url.path == "/api/logout":
                return httpx.Response(500)
            return httpx.Response(200, json=USER_JSON)

        client = mock_client(handler)
        notifier = Notifier()
        manager = AuthSessionManager(client, notifier=notifier)
        await manager.check_session()

        with pytest.raises(NetworkOrServerFailure):
            await manager.logout()

        assert isinstance(manager.state, Authenticated)
        assert notifier.last.title == "Logout failed"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_malformed_user(self):
        client = mock_client(lambda request: httpx.Response(200, json={"id": "x"}))
        manager = AuthSessionManager(client)

        with pytest.raises(NetworkOrServerFailure, match="malformed user"):
            await manager.login("ivan", "securepassword123")

        assert manager.state == Loading()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_code_is_checked_before_submission(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=USER_JSON)

        client = mock_client(handler)
        notifier = Notifier()
        manager = AuthSessionManager(client, notifier=notifier)

        with pytest.raises(CodeFormatError):
            await manager.verify_email("ivan@example.com", "12a45")

        assert requests == []
        assert notifier.last.title == "Invalid code"
        assert notifier.last.description == "Verification code must be exactly 6 digits"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_verify_email_sends_code(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=USER_JSON)

        client = mock_client(handler)
        manager = AuthSessionManager(client)

        await manager.verify_email("ivan@example.com", "482913")

        assert bodies == [{"email": "ivan@example.com", "code": "482913"}]
        assert manager.store.user.is_verified is True
        await client.aclose()

    @pytest.mark.asyncio
    async def test_concurrent_checks_share_one_request(self):
        release = asyncio.Event()
        calls = []

        async def handler(request):
            calls.append(request.url.path)
            await release.wait()
            return httpx.Response(200, json=USER_JSON)

        client = mock_client(handler)
        manager = AuthSessionManager(client)

        first = asyncio.create_task(manager.check_session())
        second = asyncio.create_task(manager.check_session())
        await asyncio.sleep(0.01)
        release.set()
        states = await asyncio.gather(first, second)

        assert calls == ["/api/user"]
        assert states[0] == states[1]
        assert isinstance(states[0], Authenticated)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_stale_check_does_not_overwrite_login(self):
        """A probe that started before a login must not undo it."""
        release = asyncio.Event()

        async def handler(request):
            if request.url.path == "/api/user":
                await release.wait()
                return httpx.Response(401, json={"error": {"message": "Authentication required"}})
            return httpx.Response(200, json=USER_JSON)

        client = mock_client(handler)
        manager = AuthSessionManager(client)

        probe = asyncio.create_task(manager.check_session())
        await asyncio.sleep(0.01)
        await manager.login("ivan", "securepassword123")
        release.set()
        await probe

        assert isinstance(manager.state, Authenticated)
        assert manager.store.user.username == "ivan"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_notifier_callback(self):
        received = []
        client = mock_client(lambda request: httpx.Response(200, json=USER_JSON))
        manager = AuthSessionManager(client, notifier=Notifier(received.append))

        await manager.login("ivan", "securepassword123")

        assert [n.title for n in received] == ["Login successful"]
        await client.aclose()
