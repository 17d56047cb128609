from __future__ import annotations

import itertools
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable

from config import config


class GameStatus(Enum):
    MENU = auto()
    PLAYING = auto()
    PAUSED = auto()
    COMPLETED = auto()


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    id: int
    message: str
    level: NoticeLevel
    timestamp: float


class Notifications:
    """Newest-first list of transient messages for the front end."""

    def __init__(
        self,
        limit: int | None = None,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = config.MAX_NOTIFICATIONS if limit is None else limit
        self.ttl = config.NOTIFICATION_TTL_S if ttl is None else ttl
        self._clock = clock
        self._ids = itertools.count(1)
        self.items: list[Notification] = []

    def add(self, message: str, level: NoticeLevel = NoticeLevel.INFO) -> Notification:
        note = Notification(next(self._ids), message, level, self._clock())
        self.items = [note, *self.items][: self.limit]
        return note

    def remove(self, note_id: int) -> None:
        self.items = [n for n in self.items if n.id != note_id]

    def prune(self) -> None:
        now = self._clock()
        self.items = [n for n in self.items if now - n.timestamp < self.ttl]

    def clear(self) -> None:
        self.items = []
