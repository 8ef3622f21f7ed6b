from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field

INVALID_PRICE_TEXT = "N/A"


class PriceEntry(BaseModel):
    symbol: str | None = None
    valid: bool = Field(default=False, validation_alias=AliasChoices("valid", "isValid"))
    price: float | None = Field(default=None, validation_alias=AliasChoices("price", "currentPrice"))

    def display(self) -> tuple[str, bool]:
        """Return the slot text and whether it shows a usable price."""
        if self.valid and self.price is not None:
            return f"${self.price:,.2f}", True
        return INVALID_PRICE_TEXT, False


class PriceSnapshot(BaseModel):
    entries: list[PriceEntry]

    @classmethod
    def from_payload(cls, payload: object) -> "PriceSnapshot":
        if not isinstance(payload, list):
            raise ValueError("price snapshot must be a JSON array")
        return cls(entries=[PriceEntry.model_validate(row) for row in payload])
