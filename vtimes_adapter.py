from __future__ import annotations

from dataclasses import dataclass
import json
import time
from typing import Any
from urllib.parse import urlencode

from command_schema import validate
from log_setup import get_logger, safe_json
from session_cache import SessionResolver
from vtimes_client import VtimesClient
from vtimes_config import Settings
from vtimes_errors import VtimesError

_log = get_logger()

LIST_PATH = "/mcp/getAllDeviceGroupScene"
OPERATE_PATH = "/mcp/sendOperate"


def _dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


@dataclass(frozen=True)
class GatewayResult:
    ok: bool
    data: Any = None
    error: str | None = None
    message: str | None = None
    details: dict | None = None

    @classmethod
    def success(cls, data: Any) -> "GatewayResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, err: VtimesError) -> "GatewayResult":
        return cls(ok=False, error=err.kind, message=str(err), details=err.details())

    def text(self) -> str:
        if self.ok:
            return _dumps(self.data)
        return _dumps({"error": self.error, "message": self.message, "details": self.details})

    def content(self) -> list[dict[str, str]]:
        return [{"type": "text", "text": self.text()}]


class VtimesGateway:
    """The two operations the MCP surfaces expose, composed from client, resolver and schema."""

    def __init__(self, client: VtimesClient, sessions: SessionResolver, strict_delay: bool = False):
        self.client = client
        self.sessions = sessions
        self.strict_delay = bool(strict_delay)

    @classmethod
    def from_settings(cls, settings: Settings) -> "VtimesGateway":
        client = VtimesClient(settings.api_key, settings.api_base, timeout_s=settings.http_timeout_s)
        return cls(client, SessionResolver(client), strict_delay=settings.strict_delay)

    def _log_call(self, tool: str, start: float, result: GatewayResult, **extra: Any) -> None:
        fields: dict[str, object] = {
            "event": "tool_call",
            "tool": tool,
            "ok": result.ok,
            "duration_ms": round((time.perf_counter() - start) * 1000.0, 2),
        }
        if not result.ok:
            fields["error"] = result.error
            fields["message"] = result.message
        fields.update(extra)
        if result.ok:
            _log.info(safe_json(fields))
        else:
            _log.warning(safe_json(fields))

    def fetch_all_controllable(self) -> GatewayResult:
        start = time.perf_counter()
        try:
            session = self.sessions.resolve()
            query = urlencode({"userId": session.user_id, "homeId": session.home_id})
            data = self.client.request_json(f"{self.client.url(LIST_PATH)}?{query}")
            result = GatewayResult.success(data)
        except VtimesError as e:
            result = GatewayResult.failure(e)
        self._log_call("get_all_device", start, result)
        if result.ok:
            _log.debug(safe_json({"event": "get_all_device_payload", "data": result.data}))
        return result

    def submit_control(self, payload: Any) -> GatewayResult:
        start = time.perf_counter()
        count = len(payload) if isinstance(payload, (list, tuple)) else None
        try:
            # Nothing is sent unless the whole batch is valid.
            batch = validate(payload, strict_delay=self.strict_delay)
            data = self.client.request_json(self.client.url(OPERATE_PATH), "POST", batch.to_payload())
            result = GatewayResult.success(data)
        except VtimesError as e:
            result = GatewayResult.failure(e)
        self._log_call("send_operate", start, result, instruction_count=count)
        if result.ok:
            _log.debug(safe_json({"event": "send_operate_payload", "data": result.data}))
        return result
