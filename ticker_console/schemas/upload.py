from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel

UploadPhase = Literal["IDLE", "SELECTED", "UPLOADING", "SUCCEEDED", "FAILED"]


class UploadState(BaseModel):
    phase: UploadPhase = "IDLE"
    filename: str | None = None
    size_bytes: int = 0
    percent: float | None = None
    progress_visible: bool = False
    message: str | None = None


class UploadProgress(BaseModel):
    kind: Literal["progress"] = "progress"
    sent_bytes: int
    total_bytes: int

    @property
    def percent(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return min(self.sent_bytes / self.total_bytes * 100.0, 100.0)


class UploadSucceeded(BaseModel):
    kind: Literal["succeeded"] = "succeeded"
    status_code: int = 200


class UploadFailed(BaseModel):
    kind: Literal["failed"] = "failed"
    status_code: int | None = None
    text: str


UploadEvent = Union[UploadProgress, UploadSucceeded, UploadFailed]
