from __future__ import annotations

from typing import Callable

from ticker_console.errors import ConfigValidationError, DeviceError, DeviceRejectedError
from ticker_console.schemas.device_config import (
    MAX_TICKERS,
    MAX_TIME_MULTIPLIER,
    MIN_TIME_MULTIPLIER,
    ConfigFieldsUpdate,
    DeviceConfig,
    TickerConfig,
)
from ticker_console.services.notifier import Notifier
from ticker_console.services.timers import Scheduler, start_timer


def validate_for_save(config: DeviceConfig) -> None:
    if len(config.tickers) > MAX_TICKERS:
        raise ConfigValidationError(f"at most {MAX_TICKERS} tickers allowed, got {len(config.tickers)}")
    for index, ticker in enumerate(config.tickers):
        if not MIN_TIME_MULTIPLIER <= ticker.time_multiplier <= MAX_TIME_MULTIPLIER:
            raise ConfigValidationError(
                f"ticker #{index + 1} timeMultiplier {ticker.time_multiplier} "
                f"outside [{MIN_TIME_MULTIPLIER}, {MAX_TIME_MULTIPLIER}]"
            )


class ConfigStore:
    """Holds the editable device configuration and syncs it with the device.

    ``load`` always replaces the snapshot wholesale. A successful ``save``
    schedules a reload after ``reload_delay_sec`` so the snapshot reflects what
    the device actually committed.
    """

    def __init__(
        self,
        *,
        client,
        notifier: Notifier,
        reload_delay_sec: float = 1.0,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.client = client
        self.notifier = notifier
        self.reload_delay_sec = reload_delay_sec
        self._scheduler = scheduler or start_timer
        self.config: DeviceConfig | None = None
        self._listeners: list[Callable[[DeviceConfig], None]] = []
        self._metrics = {
            "loads": 0,
            "load_failures": 0,
            "saves": 0,
            "save_failures": 0,
        }

    def add_listener(self, callback: Callable[[DeviceConfig], None]) -> None:
        self._listeners.append(callback)

    def load(self) -> DeviceConfig | None:
        try:
            config = DeviceConfig.model_validate(self.client.get_config())
        except (DeviceError, ValueError) as exc:
            self._metrics["load_failures"] += 1
            print(f"[CONFIG][load_error] error={exc}", flush=True)
            self.notifier.error(f"Failed to load config: {exc}")
            return None

        self.config = config
        self._metrics["loads"] += 1
        print(f"[CONFIG][loaded] tickers={len(config.tickers)}", flush=True)
        for listener in list(self._listeners):
            listener(config)
        return config

    def edit(self, update: ConfigFieldsUpdate) -> DeviceConfig | None:
        if self.config is None:
            self.notifier.error("No config loaded")
            return None
        for field_name, value in update.model_dump(exclude_none=True).items():
            setattr(self.config, field_name, value)
        return self.config

    def snapshot_for_save(self, tickers: list[TickerConfig]) -> DeviceConfig | None:
        if self.config is None:
            return None
        return self.config.model_copy(
            update={"tickers": list(tickers), "num_tickers": len(tickers)},
            deep=True,
        )

    def save(self, edited: DeviceConfig | None) -> bool:
        if edited is None:
            self.notifier.error("No config loaded")
            return False

        try:
            validate_for_save(edited)
        except ConfigValidationError as exc:
            self._metrics["save_failures"] += 1
            self.notifier.error(f"Save failed: {exc}")
            return False

        edited.num_tickers = len(edited.tickers)
        try:
            self.client.post_config(edited.to_payload())
        except DeviceRejectedError as exc:
            self._metrics["save_failures"] += 1
            print(f"[CONFIG][save_rejected] status={exc.status_code}", flush=True)
            self.notifier.error(f"Save failed: {exc.text}")
            return False
        except DeviceError as exc:
            self._metrics["save_failures"] += 1
            print(f"[CONFIG][save_error] error={exc}", flush=True)
            self.notifier.error(f"Save failed: {exc}")
            return False

        self._metrics["saves"] += 1
        print(
            f"[CONFIG][saved] tickers={edited.num_tickers} reload_in_sec={self.reload_delay_sec}",
            flush=True,
        )
        self.notifier.success("Configuration saved successfully")
        self._scheduler(self.reload_delay_sec, self.load)
        return True

    def metrics(self) -> dict:
        return dict(self._metrics)
