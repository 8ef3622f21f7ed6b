from __future__ import annotations

import threading
import time
from typing import Literal

from pydantic import BaseModel

from ticker_console.services.timers import Scheduler, start_timer

NoticeLevel = Literal["success", "error"]


class Notice(BaseModel):
    text: str
    level: NoticeLevel
    shown_at: float


class Notifier:
    """Single-slot operator message with per-message auto-clear.

    A new message replaces the displayed one immediately. Every message arms
    its own clear timer, and that timer clears whatever is displayed when it
    fires.
    """

    def __init__(self, *, ttl_sec: float = 5.0, scheduler: Scheduler | None = None) -> None:
        self.ttl_sec = ttl_sec
        self._scheduler = scheduler or start_timer
        self._lock = threading.Lock()
        self._current: Notice | None = None
        self.shown = 0

    def show(self, text: str, level: NoticeLevel) -> Notice:
        notice = Notice(text=text, level=level, shown_at=time.time())
        with self._lock:
            self._current = notice
            self.shown += 1
        print(f"[NOTICE][{level}] text={text}", flush=True)
        self._scheduler(self.ttl_sec, self._clear)
        return notice

    def success(self, text: str) -> Notice:
        return self.show(text, "success")

    def error(self, text: str) -> Notice:
        return self.show(text, "error")

    def _clear(self) -> None:
        with self._lock:
            self._current = None

    def current(self) -> Notice | None:
        with self._lock:
            return self._current
