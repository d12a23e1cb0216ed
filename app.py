# app.py (HTTP MCP surface)

from __future__ import annotations

import os
import sys
import time
import uuid

from flask import Flask, jsonify, request, g
from werkzeug.exceptions import HTTPException
from flask_mcp_server import Mcp, mount_mcp
from flask_mcp_server.http_integrated import mw_auth, mw_cors, mw_ratelimit

import flask_mcp_server

from log_setup import has_sensitive_keys, safe_json, setup_logging
from vtimes_adapter import GatewayResult, VtimesGateway
from vtimes_config import require_settings
from vtimes_prompts import GET_ALL_DEVICE_DESCRIPTION, PROMPTS, SEND_OPERATE_DESCRIPTION, prompt_messages

# A missing credential exits here, before any tool is registered.
_SETTINGS = require_settings()
_log = setup_logging(_SETTINGS.log_level, debug=_SETTINGS.debug, log_dir=_SETTINGS.log_dir)
_GATEWAY = VtimesGateway.from_settings(_SETTINGS)

# ---------- App ----------
app = Flask(__name__)


@app.before_request
def _vtimes_before_request() -> None:
    g._vtimes_start = time.perf_counter()
    g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())


def _mcp_call_fields(body: object) -> dict[str, object]:
    """Log context for one ``/mcp/call`` body: tool name, argument keys and batch size, never values."""
    if not isinstance(body, dict):
        return {}

    fields: dict[str, object] = {"mcp_kind": body.get("kind"), "mcp_name": body.get("name")}
    args = body.get("args", body.get("arguments"))
    if not isinstance(args, dict):
        return fields

    if has_sensitive_keys(args):
        fields["arg_redacted"] = True
        return fields

    fields["arg_keys"] = sorted(str(k) for k in args)[:25]
    batch = args.get("input")
    if isinstance(batch, list):
        fields["instruction_count"] = len(batch)
    return fields


@app.after_request
def _vtimes_after_request(resp):
    resp.headers["X-Request-Id"] = getattr(g, "request_id", "")
    start = getattr(g, "_vtimes_start", None)
    try:
        fields: dict[str, object] = {
            "event": "http_request",
            "request_id": getattr(g, "request_id", None),
            "method": request.method,
            "path": request.path,
            "status": resp.status_code,
            "duration_ms": round((time.perf_counter() - start) * 1000.0, 2) if start is not None else None,
        }
        if request.path.endswith("/mcp/call") and request.is_json:
            fields.update(_mcp_call_fields(request.get_json(silent=True)))
        _log.info(safe_json(fields))
    except Exception:
        # Never let logging break a request.
        _log.debug("access log failed", exc_info=True)
    return resp


@app.errorhandler(HTTPException)
def _handle_http_exception(e: HTTPException):
    status = e.code or 500
    body = {"ok": False, "error": e.name, "status": status, "details": e.description or None}
    return jsonify(body), status


@app.errorhandler(Exception)
def _handle_any_exception(e: Exception):
    _log.exception("unhandled error")
    return jsonify({"ok": False, "error": repr(e), "request_id": getattr(g, "request_id", None)}), 500


def _tool_response(result: GatewayResult) -> dict:
    out: dict = {"ok": result.ok, "content": result.content()}
    if not result.ok:
        out["error"] = result.error
        out["details"] = result.details
    return out


# ---------- MCP tools (REGISTER ON GLOBAL REGISTRY via Mcp.tool) ----------

@Mcp.tool(name="ping", description="Health check tool to verify the MCP server is reachable.")
def ping() -> dict:
    return {"ok": True}


@Mcp.tool(name="get_all_device", description=GET_ALL_DEVICE_DESCRIPTION)
def get_all_device() -> dict:
    return _tool_response(_GATEWAY.fetch_all_controllable())


@Mcp.tool(name="send_operate", description=SEND_OPERATE_DESCRIPTION)
def send_operate(input: list) -> dict:
    return _tool_response(_GATEWAY.submit_control(input))


@Mcp.tool(
    name="vtimes_server_info",
    description=(
        "Return process/runtime info for the running MCP server (PID, cwd, argv, backend base URL) "
        "plus whether the user/home session has been resolved yet."
    ),
)
def vtimes_server_info_tool() -> dict:
    reg = getattr(flask_mcp_server, "default_registry", None)
    tools_dict = getattr(reg, "tools", None) if reg is not None else None
    tool_names = sorted(tools_dict.keys()) if isinstance(tools_dict, dict) else []

    session = _GATEWAY.sessions.cached
    return {
        "ok": True,
        "pid": os.getpid(),
        "python_executable": sys.executable,
        "argv": list(sys.argv),
        "cwd": os.getcwd(),
        "api_base": _SETTINGS.api_base,
        "strict_delay": _GATEWAY.strict_delay,
        "session_resolved": session is not None,
        "registry": {"tool_count": len(tool_names), "tools": tool_names},
    }


# ---------- MCP prompts ----------

def _register_prompt(name: str, description: str) -> None:
    @Mcp.prompt(name=name, description=description)
    def _provider(**_kwargs) -> dict:
        return prompt_messages(name)


for _name, (_description, _text) in PROMPTS.items():
    _register_prompt(_name, _description)


# ✅ In 0.6.1: mount without passing a registry object or Mcp() instance
mount_mcp(app, url_prefix="/mcp", middlewares=[mw_auth, mw_ratelimit, mw_cors])


def main() -> None:
    app.run(host=_SETTINGS.bind_host, port=_SETTINGS.port, debug=False, use_reloader=False, threaded=True)


if __name__ == "__main__":
    main()
