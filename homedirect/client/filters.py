"""
Draft and committed listing filters.

A filter set maps recognized keys to strings; an empty string means the
field is unset. The draft is edited freely, and only ``submit()`` or
``reset()`` hand a committed set to subscribers (the query layer).
"""

from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Union
from urllib.parse import parse_qs
import inspect
import logging

logger = logging.getLogger(__name__)

# Enumeration order is also the parameter order of listing queries
FILTER_KEYS = (
    "listingType",
    "propertyType",
    "region",
    "city",
    "district",
    "priceMin",
    "priceMax",
    "rooms",
    "area",
)

FilterSet = Dict[str, str]
FilterSubscriber = Callable[[FilterSet], Union[None, Awaitable[None]]]


def empty_filters() -> FilterSet:
    return {key: "" for key in FILTER_KEYS}


def defined_filters(filters: Mapping[str, Optional[str]]) -> FilterSet:
    """Keep only recognized keys with a non-empty value, in enumeration order."""
    return {key: filters[key] for key in FILTER_KEYS if filters.get(key)}


class FilterStateManager:
    """
    Holds the draft filters and the committed filter set.

    Subscribers receive every committed set; coroutine subscribers are
    awaited in subscription order.
    """

    def __init__(self, initial: Optional[Mapping[str, Optional[str]]] = None):
        self._draft = empty_filters()
        for key, value in defined_filters(initial or {}).items():
            self._draft[key] = value
        self._committed = defined_filters(self._draft)
        self._subscribers: List[FilterSubscriber] = []

    @classmethod
    def from_query_string(cls, query_string: str) -> "FilterStateManager":
        """
        Seed the draft and the committed set from a page query string.

        Unrecognized keys are ignored; for repeated keys the first value wins.
        """
        params = parse_qs(query_string.lstrip("?"), keep_blank_values=True)
        seed = {key: values[0] for key, values in params.items() if key in FILTER_KEYS and values}
        logger.debug(f"Filters seeded from query string: {defined_filters(seed)}")
        return cls(seed)

    @property
    def draft(self) -> FilterSet:
        return dict(self._draft)

    @property
    def committed(self) -> FilterSet:
        return dict(self._committed)

    def set_field(self, name: str, value: Optional[str]) -> None:
        """
        Replace one draft field. Does not trigger a search.

        Raises:
            ValueError: If ``name`` is not a recognized filter
        """
        if name not in FILTER_KEYS:
            raise ValueError(f"Unknown filter field: {name}")
        self._draft[name] = "" if value is None else str(value)

    async def submit(self) -> FilterSet:
        """Commit the draft and emit it."""
        self._committed = defined_filters(self._draft)
        await self._emit()
        return self.committed

    async def reset(self) -> FilterSet:
        """Clear the draft and emit an empty committed set."""
        self._draft = empty_filters()
        self._committed = {}
        await self._emit()
        return self.committed

    def subscribe(self, callback: FilterSubscriber) -> Callable[[], None]:
        """
        Register a subscriber for committed sets.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def _emit(self) -> None:
        for subscriber in list(self._subscribers):
            result = subscriber(self.committed)
            if inspect.isawaitable(result):
                await result
