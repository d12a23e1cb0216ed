from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
import threading

from log_setup import get_logger, safe_json
from vtimes_client import VtimesClient
from vtimes_errors import ConfigFetchError, ConfigLogicError, MalformedResponseError, TransportError

_log = get_logger()

SESSION_PARAM_PATH = "/mcp/getMcpData/param"
SUCCESS_CODE = 200


@dataclass(frozen=True)
class SessionDescriptor:
    user_id: str
    home_id: str


def parse_session_envelope(envelope: object) -> SessionDescriptor:
    if not isinstance(envelope, dict) or "code" not in envelope:
        raise MalformedResponseError("Config API response has no status code")

    code = envelope.get("code")
    if code != SUCCESS_CODE:
        raise ConfigLogicError(f"Config API returned error: {envelope.get('message')}", code=code)

    data = envelope.get("data")
    if not isinstance(data, dict) or data.get("userId") is None or data.get("homeId") is None:
        raise MalformedResponseError("Config API response is missing userId/homeId")

    return SessionDescriptor(user_id=str(data["userId"]), home_id=str(data["homeId"]))


class SessionResolver:
    """Lazily fetches and memoizes the user/home scope for the process lifetime.

    Concurrent first callers share one in-flight request through a pending
    Future. A failed fetch is handed to every waiter and is not cached.
    The memoized value is never refreshed.
    """

    def __init__(self, client: VtimesClient):
        self._client = client
        self._lock = threading.Lock()
        self._session: SessionDescriptor | None = None
        self._pending: Future | None = None

    @property
    def cached(self) -> SessionDescriptor | None:
        return self._session

    def resolve(self) -> SessionDescriptor:
        with self._lock:
            if self._session is not None:
                return self._session
            pending = self._pending
            owner = pending is None
            if owner:
                pending = self._pending = Future()

        if not owner:
            return pending.result()

        try:
            session = self._fetch()
        except BaseException as e:
            with self._lock:
                self._pending = None
            pending.set_exception(e)
            raise

        with self._lock:
            if self._session is None:
                self._session = session
            session = self._session
            self._pending = None
        pending.set_result(session)
        return session

    def _fetch(self) -> SessionDescriptor:
        url = self._client.url(SESSION_PARAM_PATH)
        try:
            envelope = self._client.request_json(url)
        except TransportError as e:
            raise ConfigFetchError(f"Failed to fetch config: {e.status}", status=e.status) from e

        session = parse_session_envelope(envelope)
        _log.info(safe_json({"event": "session_resolved", "user_id": session.user_id, "home_id": session.home_id}))
        return session
