# dhanji/core/notifications.py
import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


class Notification:
    def __init__(self, title: str, description: str = "", variant: str = DEFAULT):
        self.title = title
        self.description = description
        self.variant = variant

    @property
    def is_error(self) -> bool:
        return self.variant == DESTRUCTIVE

    def __repr__(self) -> str:
        return f"Notification({self.title!r}, {self.description!r}, variant={self.variant!r})"


class Notifier:
    """
    Collects user-visible notifications and forwards them to listeners.

    The presentation layer subscribes a callback to show each notification
    (a toast, a chat reply, a terminal line). With no listener the
    notifications are only kept in `history`.
    """

    def __init__(self):
        self.history: List[Notification] = []
        self._listeners: List[Callable[[Notification], None]] = []

    def subscribe(self, listener: Callable[[Notification], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, title: str, description: str = "", variant: str = DEFAULT) -> Notification:
        notification = Notification(title, description, variant)
        self.history.append(notification)
        logger.debug("Notification: %r", notification)
        for listener in list(self._listeners):
            listener(notification)
        return notification

    def error(self, title: str, description: str = "Please try again later.") -> Notification:
        return self.notify(title, description, variant=DESTRUCTIVE)

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None

    def clear(self) -> None:
        self.history.clear()
