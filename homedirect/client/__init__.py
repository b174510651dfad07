"""
Client core for the HomeDirect API.

Verification code entry, listing filters and queries, and the
authentication session, independent of any UI toolkit.
"""

from .errors import (
    HomeDirectError,
    AuthenticationFailure,
    NotAuthenticated,
    VerificationFailure,
    NetworkOrServerFailure,
    CodeFormatError
)
from .notifications import Notification, Notifier
from .config import HomeDirectClientConfig, get_client_config
from .http import ApiClient
from .verification_input import VerificationCodeInput, validate_verification_code
from .filters import FILTER_KEYS, FilterStateManager
from .listings import (
    SortKey,
    QueryStatus,
    build_query_string,
    listings_path,
    sort_listings,
    ListingQuery,
    HttpListingsFetcher
)
from .session import (
    Loading,
    Anonymous,
    Authenticated,
    SessionError,
    SessionState,
    SessionStore,
    AuthSessionManager
)

__all__ = [
    # Errors
    "HomeDirectError",
    "AuthenticationFailure",
    "NotAuthenticated",
    "VerificationFailure",
    "NetworkOrServerFailure",
    "CodeFormatError",

    # Plumbing
    "Notification",
    "Notifier",
    "HomeDirectClientConfig",
    "get_client_config",
    "ApiClient",

    # Verification code input
    "VerificationCodeInput",
    "validate_verification_code",

    # Filters and listings
    "FILTER_KEYS",
    "FilterStateManager",
    "SortKey",
    "QueryStatus",
    "build_query_string",
    "listings_path",
    "sort_listings",
    "ListingQuery",
    "HttpListingsFetcher",

    # Session
    "Loading",
    "Anonymous",
    "Authenticated",
    "SessionError",
    "SessionState",
    "SessionStore",
    "AuthSessionManager",
]
