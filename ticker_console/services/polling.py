from __future__ import annotations

import threading
from typing import Callable

from ticker_console.schemas.prices import PriceSnapshot
from ticker_console.schemas.status import StatusSnapshot, StatusView
from ticker_console.services.ticker_editor import TickerListEditor


class PeriodicTask:
    """Runs ``tick`` every ``interval_sec`` on a daemon thread until stopped."""

    def __init__(self, name: str, interval_sec: float, tick: Callable[[], None]) -> None:
        self.name = name
        self.interval_sec = interval_sec
        self.tick = tick
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._cancelled = False
        self._metrics = {"runs": 0, "failures": 0}
        self.last_error: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def run_once(self) -> bool:
        if self._cancelled:
            return False
        try:
            self.tick()
        except Exception as exc:
            self._metrics["failures"] += 1
            self.last_error = str(exc)
            print(f"[POLL][{self.name}_error] error={exc}", flush=True)
            return False
        self._metrics["runs"] += 1
        return True

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval_sec):
            self.run_once()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._cancelled or (self.is_running() and not self._stop_event.is_set()):
            return
        # a stopping thread keeps its own event; the new loop gets a fresh one
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop, args=(self._stop_event,), daemon=True, name=f"poll-{self.name}"
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    def cancel(self) -> None:
        self._cancelled = True
        self.stop()

    def metrics(self) -> dict:
        return {
            **self._metrics,
            "interval_sec": self.interval_sec,
            "running": self.is_running(),
            "cancelled": self._cancelled,
            "last_error": self.last_error,
        }


class PollingScheduler:
    """Status and price refresh loops against the device.

    Poll failures are logged and never surfaced to the operator. The price
    loop only overlays text onto slots the editor already rendered.
    """

    def __init__(
        self,
        *,
        client,
        editor: TickerListEditor,
        status_interval_sec: float = 5.0,
        price_interval_sec: float = 10.0,
    ) -> None:
        self.client = client
        self.editor = editor
        self.status: StatusSnapshot | None = None
        self.prices: PriceSnapshot | None = None
        self.status_task = PeriodicTask("status", status_interval_sec, self.refresh_status)
        self.price_task = PeriodicTask("prices", price_interval_sec, self.refresh_prices)
        self._cancel_lock = threading.Lock()
        self._cancelled = False

    def refresh_status(self) -> None:
        self.status = StatusSnapshot.model_validate(self.client.get_status())

    def refresh_prices(self) -> None:
        snapshot = PriceSnapshot.from_payload(self.client.get_prices())
        self.prices = snapshot
        self.editor.apply_prices(snapshot)

    def poll_status_once(self) -> bool:
        return self.status_task.run_once()

    def poll_prices_once(self) -> bool:
        return self.price_task.run_once()

    def status_view(self) -> StatusView:
        status = self.status
        return status.display() if status is not None else StatusView()

    def start(self) -> None:
        self.status_task.start()
        self.price_task.start()

    def stop(self) -> None:
        self.status_task.stop()
        self.price_task.stop()

    def cancel(self) -> bool:
        """Stop both loops for good. Returns False if already cancelled."""
        with self._cancel_lock:
            if self._cancelled:
                return False
            self._cancelled = True
        self.status_task.cancel()
        self.price_task.cancel()
        print("[POLL][cancelled] tasks=status,prices", flush=True)
        return True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def metrics(self) -> dict:
        return {
            "status": self.status_task.metrics(),
            "prices": self.price_task.metrics(),
            "cancelled": self._cancelled,
        }
