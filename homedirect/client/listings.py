"""
Listing queries: canonical query strings, client-side sorting and the
fetch state of the current search.
"""

from enum import Enum
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence
from urllib.parse import quote
from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from homedirect.client.errors import NetworkOrServerFailure
from homedirect.client.filters import FILTER_KEYS, FilterStateManager
from homedirect.client.http import ApiClient
from homedirect.schemas.property import PropertyResponse
import httpx
import logging

logger = logging.getLogger(__name__)

LISTINGS_PATH = "/api/listings"

# Left unescaped by encodeURIComponent in addition to letters, digits and "-_.~"
URI_COMPONENT_SAFE = "!*'()"

ListingsFetcher = Callable[[str], Awaitable[List[Any]]]


class SortKey(str, Enum):
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    AREA_ASC = "area_asc"
    AREA_DESC = "area_desc"


DEFAULT_SORT = SortKey.NEWEST


class QueryStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


def build_query_string(filters: Mapping[str, Optional[str]]) -> str:
    """
    Build ``key=value`` pairs for recognized keys with a non-empty value.

    Keys follow the filter enumeration order; values are percent-encoded
    the way ``encodeURIComponent`` does it.
    """
    pairs = []
    for key in FILTER_KEYS:
        value = filters.get(key)
        if value is None or value == "":
            continue
        pairs.append(f"{key}={quote(str(value), safe=URI_COMPONENT_SAFE)}")
    return "&".join(pairs)


def listings_path(filters: Mapping[str, Optional[str]]) -> str:
    """The listings endpoint, with ``?query`` only when some filter is set."""
    query_string = build_query_string(filters)
    if not query_string:
        return LISTINGS_PATH
    return f"{LISTINGS_PATH}?{query_string}"


def _field(listing: Any, name: str, alias: str) -> Any:
    if isinstance(listing, Mapping):
        return listing[alias] if alias in listing else listing[name]
    return getattr(listing, name)


# name, camelCase alias, key conversion, descending
# Price and area compare as numbers even when a JSON row carries them as strings
_SORT_SPECS = {
    SortKey.NEWEST: ("created_at", "createdAt", None, True),
    SortKey.PRICE_ASC: ("price", "price", float, False),
    SortKey.PRICE_DESC: ("price", "price", float, True),
    SortKey.AREA_ASC: ("area", "area", float, False),
    SortKey.AREA_DESC: ("area", "area", float, True),
}


def sort_listings(listings: Sequence[Any], key: SortKey = DEFAULT_SORT) -> List[Any]:
    """
    Return a sorted copy of ``listings``.

    The sort is stable, so listings with equal keys keep their relative
    order; the input sequence is never modified. Works on response models
    and on camelCase or snake_case mappings alike.
    """
    name, alias, convert, descending = _SORT_SPECS[SortKey(key)]

    def sort_key(listing: Any) -> Any:
        value = _field(listing, name, alias)
        return convert(value) if convert is not None else value

    return sorted(listings, key=sort_key, reverse=descending)


class HttpListingsFetcher:
    """Fetch capability backed by the API over ``httpx``."""

    _adapter = TypeAdapter(List[PropertyResponse])

    def __init__(self, http_client: httpx.AsyncClient):
        self.api = ApiClient(http_client)

    async def __call__(self, path: str) -> List[PropertyResponse]:
        data = await self.api.get(path)
        try:
            return self._adapter.validate_python(data or [])
        except PydanticValidationError as e:
            raise NetworkOrServerFailure("Server returned malformed listings") from e


class ListingQuery:
    """
    Results of the search driven by the committed filters.

    Each committed filter set triggers a fetch. A failed fetch leaves the
    query in the ``error`` status with no results instead of raising, and
    the answer of a superseded fetch is ignored.
    """

    def __init__(self, fetch: ListingsFetcher, filters: Optional[FilterStateManager] = None):
        self._fetch = fetch
        self.filters = filters
        self.status = QueryStatus.IDLE
        self.results: List[Any] = []
        self.error: Optional[Exception] = None
        self.path: Optional[str] = None
        self._generation = 0
        self._unsubscribe = filters.subscribe(self.load) if filters is not None else None

    async def load(self, committed: Mapping[str, Optional[str]]) -> List[Any]:
        """Fetch listings for a committed filter set."""
        self._generation += 1
        generation = self._generation

        path = listings_path(committed)
        self.path = path
        self.status = QueryStatus.LOADING
        self.error = None

        try:
            results = list(await self._fetch(path))
        except Exception as e:
            if generation != self._generation:
                return self.results
            logger.error(f"Listing fetch failed for {path}: {type(e).__name__}: {e}")
            self.results = []
            self.error = e
            self.status = QueryStatus.ERROR
            return self.results

        if generation != self._generation:
            logger.debug(f"Discarding superseded results for {path}")
            return self.results

        self.results = results
        self.status = QueryStatus.SUCCESS
        logger.debug(f"Loaded {len(results)} listings for {path}")
        return self.results

    async def refresh(self) -> List[Any]:
        """Fetch again with the manager's committed filters (or none)."""
        committed = self.filters.committed if self.filters is not None else {}
        return await self.load(committed)

    def sorted(self, key: SortKey = DEFAULT_SORT) -> List[Any]:
        return sort_listings(self.results, key)

    @property
    def is_loading(self) -> bool:
        return self.status == QueryStatus.LOADING

    @property
    def is_empty(self) -> bool:
        """True once a search finished (or failed) without listings to show."""
        return self.status in (QueryStatus.SUCCESS, QueryStatus.ERROR) and not self.results

    async def reset_filters(self) -> List[Any]:
        """One-click reset from the "nothing found" state."""
        if self.filters is None:
            return await self.load({})
        await self.filters.reset()
        return self.results

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
