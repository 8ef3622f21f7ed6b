from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_TICKERS = 15
MIN_TIME_MULTIPLIER = 0.5
MAX_TIME_MULTIPLIER = 5.0
DEFAULT_BRIGHTNESS = 128
DEFAULT_BASE_TIME_MS = 8000


class TickerType(IntEnum):
    CRYPTO = 0
    STOCK = 1
    FOREX = 2


def _drop_nulls(data: Any) -> Any:
    # null on the wire means "absent" so the field default applies
    if isinstance(data, dict):
        return {k: v for k, v in data.items() if v is not None}
    return data


class TickerConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: str = ""
    api_id: str = Field(default="", alias="apiId")
    type: TickerType = TickerType.CRYPTO
    time_multiplier: float = Field(default=1.0, alias="timeMultiplier")
    enabled: bool = True

    @model_validator(mode="before")
    @classmethod
    def default_absent_fields(cls, data: Any) -> Any:
        return _drop_nulls(data)


class DeviceConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    brightness: int = Field(default=DEFAULT_BRIGHTNESS, ge=0, le=255)
    base_time_ms: int = Field(default=DEFAULT_BASE_TIME_MS, ge=0, alias="baseTimeMs")
    coin_gecko_api_key: str = Field(default="", alias="coinGeckoApiKey")
    twelve_data_api_key: str = Field(default="", alias="twelveDataApiKey")
    cmc_api_key: str = Field(default="", alias="cmcApiKey")
    tickers: list[TickerConfig] = Field(default_factory=list)
    num_tickers: int = Field(default=0, alias="numTickers")

    @model_validator(mode="before")
    @classmethod
    def default_absent_fields(cls, data: Any) -> Any:
        return _drop_nulls(data)

    def to_payload(self) -> dict[str, Any]:
        """Wire body for ``POST /api/config`` with ``numTickers`` recomputed."""
        payload = self.model_dump(mode="json", by_alias=True)
        payload["numTickers"] = len(self.tickers)
        return payload


class ConfigFieldsUpdate(BaseModel):
    """Operator edits to the scalar configuration fields."""

    model_config = ConfigDict(populate_by_name=True)

    brightness: int | None = Field(default=None, ge=0, le=255)
    base_time_ms: int | None = Field(default=None, ge=0, alias="baseTimeMs")
    coin_gecko_api_key: str | None = Field(default=None, alias="coinGeckoApiKey")
    twelve_data_api_key: str | None = Field(default=None, alias="twelveDataApiKey")
    cmc_api_key: str | None = Field(default=None, alias="cmcApiKey")
