from __future__ import annotations

import json

from vtimes_errors import MalformedResponseError, TransportError


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class FakeHttpSession:
    """Stands in for ``requests.Session``; records each call and replays queued responses."""

    def __init__(self, *responses) -> None:
        self.calls: list[dict] = []
        self._responses = list(responses)
        self.closed = False

    def request(self, method, url, headers=None, data=None, timeout=None):
        self.calls.append({"method": method, "url": url, "headers": dict(headers or {}), "data": data, "timeout": timeout})
        resp = self._responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def close(self) -> None:
        self.closed = True


class FakeClient:
    """Replaces ``VtimesClient``: routes are keyed by URL path prefix."""

    api_base = "https://backend.test/v1"

    def __init__(self, routes: dict | None = None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, str, object]] = []

    def url(self, path: str) -> str:
        return f"{self.api_base}/{path.lstrip('/')}"

    def request_json(self, url, method="GET", body=None):
        self.calls.append((method, url, body))
        path = url[len(self.api_base):].split("?", 1)[0]
        outcome = self.routes[path]
        if callable(outcome):
            outcome = outcome()
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, str):
            try:
                return json.loads(outcome)
            except ValueError as e:
                raise MalformedResponseError(str(e), body_text=outcome) from e
        return outcome

    def request_text(self, url, method="GET", body=None):
        return json.dumps(self.request_json(url, method, body))


def session_ok(user_id="u1", home_id="h1") -> dict:
    return {"code": 200, "message": "ok", "data": {"userId": user_id, "homeId": home_id}}


def http_failure(status=500, body="boom") -> TransportError:
    return TransportError(f"Request failed with status {status}", status=status, body_text=body)
