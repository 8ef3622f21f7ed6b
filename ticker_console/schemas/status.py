from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field

PLACEHOLDER = "--"


def format_bytes(value: int) -> str:
    if value < 1024:
        return f"{value} B"
    if value < 1048576:
        return f"{value / 1024:.1f} KB"
    return f"{value / 1048576:.1f} MB"


class StatusSnapshot(BaseModel):
    version: str | None = Field(default=None, validation_alias=AliasChoices("version", "firmwareVersion"))
    ssid: str | None = Field(default=None, validation_alias=AliasChoices("ssid", "wifiSSID"))
    ip: str | None = Field(default=None, validation_alias=AliasChoices("ip", "wifiIP"))
    rssi: int | None = Field(default=None, validation_alias=AliasChoices("rssi", "wifiRSSI"))
    heap: int | None = Field(default=None, validation_alias=AliasChoices("heap", "freeHeap"))
    uptime: int | str | None = None

    def display(self) -> "StatusView":
        return StatusView(
            version="v" + (self.version or "0.0.0"),
            ssid=self.ssid or PLACEHOLDER,
            ip=self.ip or PLACEHOLDER,
            rssi=f"{self.rssi} dBm" if self.rssi else PLACEHOLDER,
            heap=format_bytes(self.heap) if self.heap else PLACEHOLDER,
            uptime=str(self.uptime) if self.uptime else PLACEHOLDER,
        )


class StatusView(BaseModel):
    version: str = "v0.0.0"
    ssid: str = PLACEHOLDER
    ip: str = PLACEHOLDER
    rssi: str = PLACEHOLDER
    heap: str = PLACEHOLDER
    uptime: str = PLACEHOLDER
