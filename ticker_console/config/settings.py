import os
from functools import lru_cache

from pydantic import BaseModel, Field


class Settings(BaseModel):
    DEVICE_BASE_URL: str
    DEVICE_HTTP_TIMEOUT_SEC: float = Field(default=5.0, gt=0)
    STATUS_POLL_INTERVAL_SEC: float = Field(default=5.0, gt=0)
    PRICE_POLL_INTERVAL_SEC: float = Field(default=10.0, gt=0)
    SAVE_RELOAD_DELAY_SEC: float = Field(default=1.0, ge=0)
    NOTICE_TTL_SEC: float = Field(default=5.0, gt=0)
    FIRMWARE_UPLOAD_TIMEOUT_SEC: float = Field(default=120.0, gt=0)

    @classmethod
    def from_env(cls) -> "Settings":
        raw = {
            "DEVICE_BASE_URL": os.getenv("DEVICE_BASE_URL"),
            "DEVICE_HTTP_TIMEOUT_SEC": os.getenv("DEVICE_HTTP_TIMEOUT_SEC"),
            "STATUS_POLL_INTERVAL_SEC": os.getenv("STATUS_POLL_INTERVAL_SEC"),
            "PRICE_POLL_INTERVAL_SEC": os.getenv("PRICE_POLL_INTERVAL_SEC"),
            "SAVE_RELOAD_DELAY_SEC": os.getenv("SAVE_RELOAD_DELAY_SEC"),
            "NOTICE_TTL_SEC": os.getenv("NOTICE_TTL_SEC"),
            "FIRMWARE_UPLOAD_TIMEOUT_SEC": os.getenv("FIRMWARE_UPLOAD_TIMEOUT_SEC"),
        }
        # unset optional values fall back to the model defaults
        values = {k: v for k, v in raw.items() if v not in (None, "")}
        base_url = (raw["DEVICE_BASE_URL"] or "").strip().rstrip("/")
        values["DEVICE_BASE_URL"] = base_url or None

        return cls.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
