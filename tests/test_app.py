import importlib
import json

import pytest

from tests.fakes import FakeHttpSession, FakeResponse
from vtimes_adapter import GatewayResult
from vtimes_errors import TransportError


@pytest.fixture(scope="module")
def http_app():
    with pytest.MonkeyPatch.context() as mp:
        mp.setenv("VTIMES_API_KEY", "test-key")
        mp.setenv("VTIMES_LOG_DIR", "")
        yield importlib.import_module("app")


def test_gateway_is_built_from_environment(http_app):
    assert http_app._SETTINGS.api_key == "test-key"
    assert http_app._GATEWAY.sessions.cached is None


def test_success_response_wraps_one_text_block(http_app):
    out = http_app._tool_response(GatewayResult.success({"deviceAndDpInfoDTO": []}))

    assert out["ok"] is True
    assert out["content"] == [{"type": "text", "text": '{"deviceAndDpInfoDTO":[]}'}]
    assert "error" not in out


def test_error_response_carries_kind(http_app):
    out = http_app._tool_response(GatewayResult.failure(TransportError("Request failed with status 500", status=500)))

    assert out["ok"] is False
    assert out["error"] == "transport_error"
    assert out["details"] == {"status": 500}
    assert json.loads(out["content"][0]["text"])["error"] == "transport_error"


def test_unknown_route_returns_json_error(http_app):
    resp = http_app.app.test_client().get("/definitely-not-here")

    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False
    assert resp.headers.get("X-Request-Id")


def _tool_payload(node):
    """Find the tool's own ``{"ok", "content"}`` dict inside the MCP call envelope."""
    if isinstance(node, str):
        try:
            node = json.loads(node)
        except ValueError:
            return None
    if isinstance(node, dict):
        if "ok" in node and "content" in node:
            return node
        node = list(node.values())
    if isinstance(node, list):
        for child in node:
            found = _tool_payload(child)
            if found is not None:
                return found
    return None


def _post_call(http_app, name, args):
    body = {"kind": "tool", "name": name, "args": args, "arguments": args}
    return http_app.app.test_client().post("/mcp/call", json=body)


def test_send_operate_over_http_posts_valid_batch(http_app, monkeypatch):
    reply = {"code": 200, "data": [{"device_id": "d1", "code": 0}]}
    backend = FakeHttpSession(FakeResponse(200, json.dumps(reply)))
    monkeypatch.setattr(http_app._GATEWAY.client, "_session", backend)
    batch = [{"device_id": "d1", "property": "switch", "value": True, "ext_data": {}}]

    resp = _post_call(http_app, "send_operate", {"input": batch})

    assert resp.status_code == 200
    result = _tool_payload(resp.get_json())
    assert result["ok"] is True
    assert json.loads(result["content"][0]["text"]) == reply
    assert len(backend.calls) == 1
    assert backend.calls[0]["url"].endswith("/mcp/sendOperate")
    assert json.loads(backend.calls[0]["data"]) == batch


def test_send_operate_over_http_rejects_invalid_batch(http_app, monkeypatch):
    backend = FakeHttpSession()
    monkeypatch.setattr(http_app._GATEWAY.client, "_session", backend)

    resp = _post_call(http_app, "send_operate", {"input": [{"device_id": "d1", "scene_id": "s1", "ext_data": {}}]})

    result = _tool_payload(resp.get_json())
    assert result["ok"] is False
    assert result["error"] == "schema_violation"
    assert backend.calls == []


def test_call_log_fields_never_carry_values(http_app):
    fields = http_app._mcp_call_fields(
        {"kind": "tool", "name": "send_operate", "args": {"input": [{"scene_id": "s1", "ext_data": {}}]}}
    )
    assert fields == {"mcp_kind": "tool", "mcp_name": "send_operate", "arg_keys": ["input"], "instruction_count": 1}

    assert http_app._mcp_call_fields({"name": "x", "args": {"token": "secret"}})["arg_redacted"] is True
    assert http_app._mcp_call_fields("not a dict") == {}
