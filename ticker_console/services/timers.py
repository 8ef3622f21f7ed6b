from __future__ import annotations

import threading
from typing import Any, Callable

Scheduler = Callable[[float, Callable[[], None]], Any]


def start_timer(delay_sec: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay_sec, callback)
    timer.daemon = True
    timer.start()
    return timer
