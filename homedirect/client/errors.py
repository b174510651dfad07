"""
Client-side error taxonomy.

Every failure of a client operation is raised as a subclass of
:class:`HomeDirectError` carrying the HTTP status (if any) and the server's
message.
"""

from typing import Optional


class HomeDirectError(Exception):
    """Base class for client errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code


class AuthenticationFailure(HomeDirectError):
    """Bad credentials on login or admin login."""


class NotAuthenticated(HomeDirectError):
    """The session probe answered 401. A valid state, not a failure to report."""


class VerificationFailure(HomeDirectError):
    """Wrong, expired or unknown verification code."""


class NetworkOrServerFailure(HomeDirectError):
    """Any other non-2xx answer or a transport failure (including timeouts)."""


class CodeFormatError(HomeDirectError):
    """A verification code rejected by local validation before submission."""
