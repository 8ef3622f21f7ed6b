from __future__ import annotations

from ticker_console.errors import CapacityExceededError, ConfigValidationError
from ticker_console.schemas.device_config import MAX_TICKERS, TickerConfig, TickerType
from ticker_console.schemas.prices import PriceSnapshot
from ticker_console.schemas.view import TickerListView, TickerSlotEdit, TickerSlotView
from ticker_console.services.config_store import ConfigStore
from ticker_console.services.notifier import Notifier

_FIELD_ID_PREFIXES = {
    "symbol": "symbol",
    "api_id": "apiId",
    "type": "type",
    "time_multiplier": "mult",
    "enabled": "enabled",
    "price": "price",
}


class TickerListEditor:
    """Positional editor over ``store.config.tickers``.

    Slots are the rendered form state: one per ticker, addressed by list
    index. Every structural change rebuilds all slots so no slot ever refers
    to an index that moved.
    """

    def __init__(self, *, store: ConfigStore, notifier: Notifier) -> None:
        self.store = store
        self.notifier = notifier
        self._slots: list[TickerSlotView] = []

    def _tickers(self) -> list[TickerConfig] | None:
        config = self.store.config
        return config.tickers if config is not None else None

    @staticmethod
    def _build_slot(index: int, ticker: TickerConfig) -> TickerSlotView:
        return TickerSlotView(
            index=index,
            slot=index + 1,
            field_ids={name: f"{prefix}-{index}" for name, prefix in _FIELD_ID_PREFIXES.items()},
            symbol=ticker.symbol,
            api_id=ticker.api_id,
            type=str(int(ticker.type)),
            time_multiplier=str(ticker.time_multiplier),
            enabled=ticker.enabled,
        )

    def render(self) -> TickerListView:
        tickers = self._tickers() or []
        self._slots = [self._build_slot(i, t) for i, t in enumerate(tickers)]
        return self.view()

    def view(self) -> TickerListView:
        count = len(self._tickers() or [])
        return TickerListView(
            slots=[slot.model_copy() for slot in self._slots],
            count_text=f"{count}/{MAX_TICKERS}",
            add_disabled=count >= MAX_TICKERS,
        )

    def collect(self) -> list[TickerConfig]:
        """Parse the slot form values into a fresh ticker list.

        Values are parsed but not range checked; ``timeMultiplier`` bounds are
        enforced when the configuration is saved.
        """
        out: list[TickerConfig] = []
        for slot in self._slots:
            try:
                ticker_type = TickerType(int(slot.type))
            except ValueError as exc:
                raise ConfigValidationError(f"ticker #{slot.slot} has invalid type {slot.type!r}") from exc
            try:
                multiplier = float(slot.time_multiplier)
            except ValueError as exc:
                raise ConfigValidationError(
                    f"ticker #{slot.slot} has invalid timeMultiplier {slot.time_multiplier!r}"
                ) from exc
            out.append(
                TickerConfig(
                    symbol=slot.symbol,
                    api_id=slot.api_id,
                    type=ticker_type,
                    time_multiplier=multiplier,
                    enabled=slot.enabled,
                )
            )
        return out

    def _fold_edits(self) -> None:
        # keep unsaved form values across the full re-render
        config = self.store.config
        if config is None or len(self._slots) != len(config.tickers):
            return
        config.tickers = self.collect()

    def add(self) -> bool:
        config = self.store.config
        if config is None:
            self.notifier.error("No config loaded")
            return False
        try:
            if len(config.tickers) >= MAX_TICKERS:
                raise CapacityExceededError(f"Maximum {MAX_TICKERS} tickers allowed")
            self._fold_edits()
        except ConfigValidationError as exc:
            self.notifier.error(str(exc))
            return False

        config.tickers.append(TickerConfig())
        self.render()
        return True

    def remove(self, index: int) -> bool:
        tickers = self._tickers()
        if tickers is None:
            return False
        if not 0 <= index < len(tickers):
            self.notifier.error(f"No ticker in slot {index + 1}")
            return False
        try:
            self._fold_edits()
        except ConfigValidationError as exc:
            self.notifier.error(str(exc))
            return False

        del self.store.config.tickers[index]
        self.render()
        return True

    def edit_slot(self, index: int, edit: TickerSlotEdit) -> TickerSlotView | None:
        if not 0 <= index < len(self._slots):
            self.notifier.error(f"No ticker in slot {index + 1}")
            return None

        slot = self._slots[index]
        changes = edit.model_dump(exclude_none=True)
        for field_name in ("type", "time_multiplier"):
            if field_name in changes:
                changes[field_name] = str(changes[field_name])
        for field_name, value in changes.items():
            setattr(slot, field_name, value)
        return slot.model_copy()

    def apply_prices(self, snapshot: PriceSnapshot) -> int:
        """Overlay prices onto rendered slots by position; returns slots updated."""
        slots = self._slots
        updated = 0
        for index, entry in enumerate(snapshot.entries):
            if index >= len(slots):
                continue
            text, valid = entry.display()
            slots[index].price_text = text
            slots[index].price_valid = valid
            updated += 1
        return updated
