from __future__ import annotations

import itertools
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List

DEFAULT_TOAST_SECONDS = 5.0


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    id: int
    kind: NotificationKind
    message: str
    created_at: float
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


class NotificationFeed:
    """FIFO of self-expiring toasts. Messages stack; none overwrites another."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TOAST_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._ids = itertools.count(1)
        self._items: List[Notification] = []
        self._lock = threading.Lock()

    def push(self, kind: NotificationKind, message: str) -> Notification:
        now = self._clock()
        with self._lock:
            notification = Notification(
                id=next(self._ids),
                kind=NotificationKind(kind),
                message=message,
                created_at=now,
                expires_at=now + self.ttl_seconds,
            )
            self._items.append(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.push(NotificationKind.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.push(NotificationKind.ERROR, message)

    def info(self, message: str) -> Notification:
        return self.push(NotificationKind.INFO, message)

    def dismiss(self, notification_id: int) -> bool:
        with self._lock:
            remaining = [item for item in self._items if item.id != notification_id]
            removed = len(remaining) != len(self._items)
            self._items = remaining
        return removed

    def active(self) -> List[Notification]:
        now = self._clock()
        with self._lock:
            self._items = [item for item in self._items if not item.expired(now)]
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items = []
