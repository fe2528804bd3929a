"""Toast-style user notifications."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass

INFO = "info"
SUCCESS = "success"
WARNING = "warning"
ERROR = "error"


@dataclass
class Notification:
    title: str
    description: str = ""
    severity: str = INFO

    def __str__(self) -> str:
        if self.description:
            return f"{self.title}\n  {self.description}"
        return self.title


class Notifier(ABC):
    """Fire-and-forget sink for outcome messages."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        ...


class ConsoleNotifier(Notifier):
    """Prints notifications; warnings and errors go to stderr."""

    def notify(self, notification: Notification) -> None:
        if notification.severity in (WARNING, ERROR):
            print(str(notification), file=sys.stderr)
        else:
            print(str(notification))


class MemoryNotifier(Notifier):
    """Collects notifications in a list."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None
