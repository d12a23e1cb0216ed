import json

from tools import probe_gateway


class _FakeHTTPResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_plan_defaults_to_listing():
    assert probe_gateway.plan(["probe_gateway.py"]) == [("get_all_device", {})]


def test_plan_sends_json_batch():
    batch = '[{"scene_id": "s1", "ext_data": {}}]'
    assert probe_gateway.plan(["probe_gateway.py", batch]) == [("send_operate", {"input": [{"scene_id": "s1", "ext_data": {}}]})]


def test_call_posts_tool_invocation(monkeypatch):
    seen = {}

    def fake_urlopen(req, timeout=None):
        seen["url"] = req.full_url
        seen["body"] = json.loads(req.data.decode("utf-8"))
        return _FakeHTTPResponse(b'{"ok": true}')

    monkeypatch.setattr(probe_gateway.urllib.request, "urlopen", fake_urlopen)

    out = probe_gateway.call("get_all_device", {}, base="http://gw.test")

    assert out == '{"ok": true}'
    assert seen["url"] == "http://gw.test/mcp/call"
    assert seen["body"] == {"kind": "tool", "name": "get_all_device", "args": {}}
