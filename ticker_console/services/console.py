from __future__ import annotations

from ticker_console.errors import ConfigValidationError, DeviceError, DeviceRejectedError
from ticker_console.integrations.device_rest import DeviceRestClient
from ticker_console.services.config_store import ConfigStore
from ticker_console.services.firmware_upload import FirmwareUploadManager
from ticker_console.services.notifier import Notifier
from ticker_console.services.polling import PollingScheduler
from ticker_console.services.ticker_editor import TickerListEditor
from ticker_console.services.timers import Scheduler


class DeviceConsole:
    """Wires the store, editor, pollers and uploader around one device client."""

    def __init__(
        self,
        *,
        client,
        status_interval_sec: float = 5.0,
        price_interval_sec: float = 10.0,
        reload_delay_sec: float = 1.0,
        notice_ttl_sec: float = 5.0,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.client = client
        self.notifier = Notifier(ttl_sec=notice_ttl_sec, scheduler=scheduler)
        self.store = ConfigStore(
            client=client,
            notifier=self.notifier,
            reload_delay_sec=reload_delay_sec,
            scheduler=scheduler,
        )
        self.editor = TickerListEditor(store=self.store, notifier=self.notifier)
        self.poller = PollingScheduler(
            client=client,
            editor=self.editor,
            status_interval_sec=status_interval_sec,
            price_interval_sec=price_interval_sec,
        )
        self.firmware = FirmwareUploadManager(client=client, notifier=self.notifier)

        self.store.add_listener(lambda _config: self.editor.render())
        self.store.add_listener(lambda _config: self.poller.poll_prices_once())

    @classmethod
    def from_settings(cls, settings, *, session=None) -> "DeviceConsole":
        client = DeviceRestClient(
            settings.DEVICE_BASE_URL,
            session=session,
            timeout=settings.DEVICE_HTTP_TIMEOUT_SEC,
            upload_timeout=settings.FIRMWARE_UPLOAD_TIMEOUT_SEC,
        )
        return cls(
            client=client,
            status_interval_sec=settings.STATUS_POLL_INTERVAL_SEC,
            price_interval_sec=settings.PRICE_POLL_INTERVAL_SEC,
            reload_delay_sec=settings.SAVE_RELOAD_DELAY_SEC,
            notice_ttl_sec=settings.NOTICE_TTL_SEC,
        )

    def start(self) -> None:
        self.store.load()
        self.poller.poll_status_once()
        self.poller.start()
        print("[DEVICE][console_start]", flush=True)

    def stop(self) -> None:
        self.poller.stop()
        print("[DEVICE][console_stop]", flush=True)

    def save(self) -> bool:
        try:
            tickers = self.editor.collect()
        except ConfigValidationError as exc:
            self.notifier.error(f"Save failed: {exc}")
            return False
        return self.store.save(self.store.snapshot_for_save(tickers))

    def restart(self, *, confirm: bool) -> bool:
        if not confirm:
            return False
        try:
            self.client.restart()
        except DeviceRejectedError as exc:
            self.notifier.error(f"Restart failed: {exc.text}")
            return False
        except DeviceError as exc:
            self.notifier.error(f"Restart failed: {exc}")
            return False

        self.notifier.success("Device restarting...")
        self.poller.cancel()
        return True
