from __future__ import annotations

import threading

from ticker_console.integrations.device_rest import NETWORK_ERROR_TEXT
from ticker_console.schemas.upload import (
    UploadEvent,
    UploadFailed,
    UploadProgress,
    UploadState,
    UploadSucceeded,
)
from ticker_console.services.notifier import Notifier

FIRMWARE_EXTENSION = ".bin"

_UPLOADABLE_PHASES = {"SELECTED", "FAILED"}


class FirmwareUploadManager:
    """IDLE -> SELECTED -> UPLOADING -> SUCCEEDED | FAILED.

    A failed upload keeps the selected image so it can be sent again; any
    new selection replaces it.
    """

    def __init__(self, *, client, notifier: Notifier) -> None:
        self.client = client
        self.notifier = notifier
        self._lock = threading.Lock()
        self._state = UploadState()
        self._content: bytes | None = None

    def state(self) -> UploadState:
        with self._lock:
            return self._state.model_copy()

    def _reset(self) -> None:
        with self._lock:
            self._state = UploadState()
            self._content = None

    def select(self, filename: str | None, content: bytes | None) -> bool:
        if self.state().phase == "UPLOADING":
            self.notifier.error("Upload already in progress")
            return False
        if not filename or content is None:
            self._reset()
            self.notifier.error("Please select a firmware file")
            return False
        if not filename.endswith(FIRMWARE_EXTENSION):
            self._reset()
            self.notifier.error(f"Please select a {FIRMWARE_EXTENSION} file")
            return False

        with self._lock:
            self._state = UploadState(phase="SELECTED", filename=filename, size_bytes=len(content))
            self._content = content
        print(f"[FIRMWARE][selected] filename={filename} bytes={len(content)}", flush=True)
        return True

    def upload(self) -> bool:
        with self._lock:
            phase = self._state.phase
            if phase == "UPLOADING":
                error = "Upload already in progress"
            elif phase not in _UPLOADABLE_PHASES or self._content is None:
                error = "Please select a firmware file"
            else:
                error = None
                filename = self._state.filename
                content = self._content
                self._state = self._state.model_copy(
                    update={"phase": "UPLOADING", "percent": 0.0, "progress_visible": True, "message": None}
                )
        if error is not None:
            self.notifier.error(error)
            return False

        print(f"[FIRMWARE][upload_start] filename={filename} bytes={len(content)}", flush=True)
        try:
            self.client.upload_firmware(filename, content, on_event=self.apply)
        except Exception as exc:
            print(f"[FIRMWARE][upload_error] filename={filename} error={exc}", flush=True)
            self.apply(UploadFailed(text=str(exc) or NETWORK_ERROR_TEXT))
        return self.state().phase == "SUCCEEDED"

    def apply(self, event: UploadEvent) -> UploadState:
        """Advance the state machine with one transport event."""
        with self._lock:
            if self._state.phase != "UPLOADING":
                return self._state.model_copy()

            if isinstance(event, UploadProgress):
                # latest report wins, even if the transport re-reports lower
                self._state.percent = event.percent
                return self._state.model_copy()

            if isinstance(event, UploadSucceeded):
                message = "Firmware uploaded successfully. Device will restart..."
                self._state = self._state.model_copy(
                    update={"phase": "SUCCEEDED", "percent": 100.0, "progress_visible": False, "message": message}
                )
            elif isinstance(event, UploadFailed):
                message = f"Upload failed: {event.text}"
                self._state = self._state.model_copy(
                    update={"phase": "FAILED", "progress_visible": False, "message": message}
                )
            else:
                raise TypeError(f"unsupported upload event: {event!r}")
            state = self._state.model_copy()

        print(f"[FIRMWARE][upload_{state.phase.lower()}] filename={state.filename}", flush=True)
        if state.phase == "SUCCEEDED":
            self.notifier.success(message)
        else:
            self.notifier.error(message)
        return state
