"""
User-visible notifications raised by client operations.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    variant: str = DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant == DESTRUCTIVE


class Notifier:
    """
    Collects notifications and forwards them to an optional callback.

    A front end passes its toast function as ``callback``; tests read
    ``history``.
    """

    def __init__(self, callback: Optional[Callable[[Notification], None]] = None):
        self._callback = callback
        self.history: List[Notification] = []

    def notify(self, title: str, description: str = "", variant: str = DEFAULT) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.history.append(notification)
        logger.debug(f"Notification [{variant}]: {title} - {description}")

        if self._callback is not None:
            self._callback(notification)
        return notification

    def success(self, title: str, description: str = "") -> Notification:
        return self.notify(title, description, DEFAULT)

    def error(self, title: str, description: str = "") -> Notification:
        return self.notify(title, description, DESTRUCTIVE)

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None

    def clear(self) -> None:
        self.history.clear()
