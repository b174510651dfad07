"""
Session state of the client and the operations that change it.

The session is a tagged union of :class:`Loading`, :class:`Anonymous`,
:class:`Authenticated` and :class:`SessionError`. :class:`SessionStore` is
the single slot holding it: anyone may read or subscribe, but only
:class:`AuthSessionManager` writes to it.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from pydantic import ValidationError as PydanticValidationError
from homedirect.client.errors import (
    HomeDirectError,
    AuthenticationFailure,
    NotAuthenticated,
    VerificationFailure,
    NetworkOrServerFailure,
    CodeFormatError
)
from homedirect.client.http import ApiClient, ErrorMap
from homedirect.client.notifications import Notifier
from homedirect.client.verification_input import validate_verification_code
from homedirect.schemas.user import UserCreate, UserResponse
import asyncio
import httpx
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Loading:
    """The first session check has not answered yet."""


@dataclass(frozen=True)
class Anonymous:
    """Nobody is logged in."""


@dataclass(frozen=True)
class Authenticated:
    user: UserResponse


@dataclass(frozen=True)
class SessionError:
    error: HomeDirectError


SessionState = Union[Loading, Anonymous, Authenticated, SessionError]
SessionListener = Callable[[SessionState], None]


class SessionStore:
    """
    The owned session slot.

    ``version`` increases on every write, which lets the manager tell whether
    the session changed while a request was in flight.
    """

    def __init__(self):
        self._state: SessionState = Loading()
        self._version = 0
        self._listeners: List[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def version(self) -> int:
        return self._version

    @property
    def user(self) -> Optional[UserResponse]:
        if isinstance(self._state, Authenticated):
            return self._state.user
        return None

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, Loading)

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self._state, Authenticated)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Get notified of every session change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _write(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        self._version += 1
        logger.debug(f"Session {type(previous).__name__} -> {type(state).__name__} (v{self._version})")

        for listener in list(self._listeners):
            listener(state)


class AuthSessionManager:
    """
    Runs the authentication flow against the API and keeps the session slot current.

    Every operation reports its outcome through the notifier. Failures leave
    the session as it was and are raised to the caller as typed errors.

    Args:
        http_client: ``httpx.AsyncClient`` pointed at the API; it must keep
            cookies between requests
        store: Session slot to write to (a new one by default)
        notifier: Receiver of user-visible notifications (a new one by default)
        code_length: Digits expected in a verification code
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        store: Optional[SessionStore] = None,
        notifier: Optional[Notifier] = None,
        code_length: int = 6
    ):
        self.api = ApiClient(http_client)
        self.store = store if store is not None else SessionStore()
        self.notifier = notifier if notifier is not None else Notifier()
        self.code_length = code_length
        self._session_check: Optional[asyncio.Task] = None

    @property
    def state(self) -> SessionState:
        return self.store.state

    async def check_session(self) -> SessionState:
        """
        Ask the server who is logged in.

        Concurrent callers share one request. A 401 means Anonymous and is
        not reported; any other failure becomes SessionError with a
        notification. The answer is dropped if another operation wrote the
        session while the request was in flight.
        """
        if self._session_check is None or self._session_check.done():
            self._session_check = asyncio.ensure_future(self._check_session())
        return await asyncio.shield(self._session_check)

    async def _check_session(self) -> SessionState:
        started_at = self.store.version
        failure: Optional[HomeDirectError] = None

        try:
            data = await self.api.get("/api/user", errors={401: NotAuthenticated})
            new_state: SessionState = Authenticated(self._parse_user(data))
        except NotAuthenticated:
            new_state = Anonymous()
        except HomeDirectError as e:
            failure = e
            new_state = SessionError(e)

        if self.store.version != started_at:
            logger.debug("Discarding session check answer: session changed meanwhile")
            return self.store.state

        self.store._write(new_state)
        if failure is not None:
            self.notifier.error("Session check failed", failure.message)
        return new_state

    async def login(self, username: str, password: str) -> UserResponse:
        """
        Raises:
            AuthenticationFailure: If the credentials are rejected
            NetworkOrServerFailure: For any other failure
        """
        user = await self._start_session(
            "/api/login",
            {"username": username, "password": password},
            errors={401: AuthenticationFailure},
            failure_title="Login failed"
        )
        self.notifier.success("Login successful", f"Welcome back, {user.first_name}!")
        return user

    async def admin_login(self, username: str, password: str) -> UserResponse:
        """
        Log in through the administrator endpoint.

        Raises:
            AuthenticationFailure: If the credentials are rejected or the account is not an admin
            NetworkOrServerFailure: For any other failure
        """
        user = await self._start_session(
            "/api/admin/login",
            {"username": username, "password": password},
            errors={401: AuthenticationFailure, 403: AuthenticationFailure},
            failure_title="Admin login failed"
        )
        self.notifier.success("Admin login successful", "Welcome to the admin panel")
        return user

    async def register(self, user_data: Union[UserCreate, Mapping[str, Any]]) -> UserResponse:
        """
        Create an account. The session then holds the new, unverified user.

        Raises:
            NetworkOrServerFailure: If the server rejects the registration
        """
        if isinstance(user_data, UserCreate):
            body = user_data.model_dump(by_alias=True, exclude_none=True)
        else:
            body = dict(user_data)

        user = await self._start_session(
            "/api/register",
            body,
            errors={},
            failure_title="Registration failed"
        )
        self.notifier.success("Registration successful", "Please verify your email address")
        return user

    async def verify_email(self, email: str, code: str) -> UserResponse:
        """
        Submit a verification code. The session then holds the verified user.

        Raises:
            CodeFormatError: If the code is not exactly ``code_length`` digits
            VerificationFailure: If the server rejects the code
            NetworkOrServerFailure: For any other failure
        """
        try:
            validate_verification_code(code, self.code_length)
        except CodeFormatError as e:
            self.notifier.error("Invalid code", e.message)
            raise

        user = await self._start_session(
            "/api/verify-email",
            {"email": email, "code": code},
            errors={400: VerificationFailure, 404: VerificationFailure},
            failure_title="Verification failed"
        )
        self.notifier.success("Email verified", "Your email has been successfully verified")
        return user

    async def request_verification(self, email: str) -> None:
        """
        Ask for a new verification code. The session is not touched.

        Raises:
            VerificationFailure: If the email is unknown or already verified
            NetworkOrServerFailure: For any other failure
        """
        await self._send_verification("/api/request-verification", email)

    async def resend_verification(self, email: str) -> None:
        await self._send_verification("/api/resend-verification", email)

    async def logout(self) -> None:
        """
        End the session. On success the session is Anonymous whatever it was before.

        Raises:
            NetworkOrServerFailure: If the server could not be reached or failed
        """
        try:
            await self.api.post("/api/logout")
        except HomeDirectError as e:
            self.notifier.error("Logout failed", e.message)
            raise

        self.store._write(Anonymous())
        self.notifier.success("Logged out", "You have been successfully logged out")

    async def _start_session(
        self,
        path: str,
        body: Dict[str, Any],
        errors: ErrorMap,
        failure_title: str
    ) -> UserResponse:
        try:
            data = await self.api.post(path, json=body, errors=errors)
            user = self._parse_user(data)
        except HomeDirectError as e:
            self.notifier.error(failure_title, e.message)
            raise

        self.store._write(Authenticated(user))
        return user

    async def _send_verification(self, path: str, email: str) -> None:
        try:
            await self.api.post(
                path,
                json={"email": email},
                errors={400: VerificationFailure, 404: VerificationFailure}
            )
        except HomeDirectError as e:
            self.notifier.error("Failed to send verification code", e.message)
            raise

        self.notifier.success("Verification code sent", "A new verification code has been sent to your email")

    @staticmethod
    def _parse_user(data: Any) -> UserResponse:
        try:
            return UserResponse.model_validate(data)
        except PydanticValidationError as e:
            raise NetworkOrServerFailure("Server returned a malformed user") from e
