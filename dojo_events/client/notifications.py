import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: str = DEFAULT


class Notifier:
    """Collects transient notifications in the order they were raised."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def success(self, description: str, title: str = "Success") -> Notification:
        return self._push(Notification(title, description))

    def error(self, description: str, title: str = "Error") -> Notification:
        return self._push(Notification(title, description, DESTRUCTIVE))

    def _push(self, notification: Notification) -> Notification:
        level = logging.WARNING if notification.variant == DESTRUCTIVE else logging.INFO
        logger.log(level, "%s: %s", notification.title, notification.description)
        self.notifications.append(notification)
        return notification

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        self.notifications.clear()
