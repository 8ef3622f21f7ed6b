from __future__ import annotations

from pydantic import BaseModel

PRICE_PLACEHOLDER = "--"


class TickerSlotView(BaseModel):
    index: int
    slot: int
    field_ids: dict[str, str]
    symbol: str
    api_id: str
    type: str
    time_multiplier: str
    enabled: bool
    price_text: str = PRICE_PLACEHOLDER
    price_valid: bool | None = None


class TickerListView(BaseModel):
    slots: list[TickerSlotView]
    count_text: str
    add_disabled: bool


class TickerSlotEdit(BaseModel):
    """Raw form values for one slot; omitted fields are left as they are."""

    symbol: str | None = None
    api_id: str | None = None
    type: str | int | None = None
    time_multiplier: str | float | None = None
    enabled: bool | None = None
