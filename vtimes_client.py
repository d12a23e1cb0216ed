from __future__ import annotations

import json
from typing import Any

import requests

from log_setup import get_logger, safe_json
from vtimes_errors import MalformedResponseError, TransportError

_log = get_logger()

JsonValue = Any


def encode_body(body: Any) -> bytes:
    """Compact UTF-8 JSON, byte-compatible with a JavaScript ``JSON.stringify``."""
    return json.dumps(body, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


class VtimesClient:
    """Bearer-authenticated HTTP helper for the VTimes MCP backend.

    Every failure propagates to the caller; nothing here retries.
    """

    def __init__(self, api_key: str, api_base: str, timeout_s: float | None = None, session: requests.Session | None = None):
        self.api_base = str(api_base).rstrip("/")
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def url(self, path: str) -> str:
        return f"{self.api_base}/{str(path).lstrip('/')}"

    def _send(self, url: str, method: str, body: Any) -> str:
        data = encode_body(body) if body is not None else None
        try:
            resp = self._session.request(method, url, headers=self.headers, data=data, timeout=self.timeout_s)
        except requests.RequestException as e:
            _log.debug(safe_json({"event": "http_error", "method": method, "url": url, "error": repr(e)}))
            raise TransportError(f"Request failed: {e}") from e

        text = resp.text
        if not resp.ok:
            _log.debug(safe_json({"event": "http_failed", "method": method, "url": url, "status": resp.status_code, "body": text[:2000]}))
            raise TransportError(f"Request failed with status {resp.status_code}", status=resp.status_code, body_text=text)

        return text

    def request_text(self, url: str, method: str = "GET", body: Any = None) -> str:
        return self._send(url, method, body)

    def request_json(self, url: str, method: str = "GET", body: Any = None) -> JsonValue:
        text = self._send(url, method, body)
        try:
            return json.loads(text)
        except ValueError as e:
            _log.debug(safe_json({"event": "json_parse_failed", "url": url, "body": text[:2000]}))
            raise MalformedResponseError(f"Backend returned non-JSON body: {e}", body_text=text) from e

    def close(self) -> None:
        self._session.close()
