from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import requests
from urllib3 import encode_multipart_formdata

from ticker_console.errors import DeviceRejectedError, DeviceTransportError
from ticker_console.schemas.upload import UploadEvent, UploadFailed, UploadProgress, UploadSucceeded

NETWORK_ERROR_TEXT = "Network error"


class _ProgressReader:
    """Read-only body that reports cumulative bytes handed to the transport."""

    def __init__(self, body: bytes, on_progress: Callable[[int, int], None]) -> None:
        self._body = body
        self._offset = 0
        self._on_progress = on_progress

    def __len__(self) -> int:
        return len(self._body)

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            size = len(self._body) - self._offset
        chunk = self._body[self._offset:self._offset + size]
        self._offset += len(chunk)
        if chunk:
            self._on_progress(self._offset, len(self._body))
        return chunk


class DeviceRestClient:
    """HTTP client for the ticker display's embedded web server."""

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[Any] = None,
        timeout: float = 5.0,
        upload_timeout: float = 120.0,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.session = session or requests
        self.timeout = timeout
        self.upload_timeout = upload_timeout

    @staticmethod
    def _is_success(response: Any) -> bool:
        return 200 <= int(response.status_code) < 300

    def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        sender = self.session.get if method == "GET" else self.session.post
        try:
            response = sender(f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise DeviceTransportError(str(exc)) from exc

        if not self._is_success(response):
            raise DeviceRejectedError(int(response.status_code), response.text)
        return response

    @staticmethod
    def _decode(response: Any, path: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise DeviceTransportError(f"invalid JSON from {path}: {exc}") from exc

    def get_config(self) -> Dict[str, Any]:
        payload = self._decode(self._send("GET", "/api/config"), "/api/config")
        if not isinstance(payload, dict):
            raise DeviceTransportError("config payload must be a JSON object")
        return payload

    def post_config(self, payload: Dict[str, Any]) -> None:
        self._send(
            "POST",
            "/api/config",
            headers={"Content-Type": "application/json"},
            json=payload,
        )

    def get_status(self) -> Dict[str, Any]:
        payload = self._decode(self._send("GET", "/api/status"), "/api/status")
        if not isinstance(payload, dict):
            raise DeviceTransportError("status payload must be a JSON object")
        return payload

    def get_prices(self) -> List[Any]:
        payload = self._decode(self._send("GET", "/api/tickers"), "/api/tickers")
        if not isinstance(payload, list):
            raise DeviceTransportError("ticker payload must be a JSON array")
        return payload

    def restart(self) -> None:
        self._send("POST", "/api/restart")

    def upload_firmware(
        self,
        filename: str,
        content: bytes,
        on_event: Callable[[UploadEvent], None],
    ) -> None:
        """Send ``content`` as the multipart ``firmware`` field of ``POST /update``.

        Progress is reported through ``on_event`` while the body is consumed,
        followed by exactly one terminal event. Transport errors are reported as
        an ``UploadFailed`` event instead of being raised.
        """
        body, content_type = encode_multipart_formdata(
            {"firmware": (filename, content, "application/octet-stream")}
        )
        reader = _ProgressReader(
            body,
            on_progress=lambda sent, total: on_event(UploadProgress(sent_bytes=sent, total_bytes=total)),
        )

        try:
            response = self.session.post(
                f"{self.base_url}/update",
                data=reader,
                headers={"Content-Type": content_type},
                timeout=self.upload_timeout,
            )
        except requests.RequestException as exc:
            print(f"[FIRMWARE][upload_transport_error] error={exc}", flush=True)
            on_event(UploadFailed(text=NETWORK_ERROR_TEXT))
            return

        if int(response.status_code) == 200:
            on_event(UploadSucceeded(status_code=200))
        else:
            on_event(UploadFailed(status_code=int(response.status_code), text=response.text))
