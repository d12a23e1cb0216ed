"""stdio MCP entry point: the channel a local agent host launches as a subprocess.

stdout carries protocol frames only; diagnostics go to stderr and the log file.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.server.fastmcp.prompts.base import AssistantMessage

from log_setup import safe_json, setup_logging
from vtimes_adapter import GatewayResult, VtimesGateway
from vtimes_config import require_settings
from vtimes_errors import VtimesError
from vtimes_prompts import GET_ALL_DEVICE_DESCRIPTION, PROMPTS, SEND_OPERATE_DESCRIPTION

SERVER_NAME = "mcp-server-vtimes"


def _unwrap(result: GatewayResult) -> str:
    if not result.ok:
        raise ToolError(result.text())
    return result.text()


def _register_prompt(server: FastMCP, name: str, description: str, text: str) -> None:
    @server.prompt(name=name, description=description)
    def _prompt() -> list[AssistantMessage]:
        return [AssistantMessage(text)]


def build_server(gateway: VtimesGateway) -> FastMCP:
    server = FastMCP(SERVER_NAME)

    @server.tool(name="get_all_device", description=GET_ALL_DEVICE_DESCRIPTION)
    async def get_all_device() -> str:
        # Blocking HTTP runs off the event loop so concurrent calls overlap.
        return _unwrap(await asyncio.to_thread(gateway.fetch_all_controllable))

    # Items stay untyped here so command_schema.validate owns every rejection.
    @server.tool(name="send_operate", description=SEND_OPERATE_DESCRIPTION)
    async def send_operate(input: list[Any]) -> str:
        return _unwrap(await asyncio.to_thread(gateway.submit_control, input))

    for name, (description, text) in PROMPTS.items():
        _register_prompt(server, name, description, text)

    return server


def main() -> None:
    settings = require_settings()
    log = setup_logging(settings.log_level, debug=settings.debug, log_dir=settings.log_dir)

    try:
        gateway = VtimesGateway.from_settings(settings)
        server = build_server(gateway)

        if settings.prefetch_session:
            try:
                session = gateway.sessions.resolve()
                log.debug(safe_json({"event": "session_prefetched", "user_id": session.user_id, "home_id": session.home_id}))
            except VtimesError as e:
                # Tools retry the resolution on first use.
                log.warning(safe_json({"event": "session_prefetch_failed", "error": e.kind, "message": str(e)}))

        log.debug(safe_json({"event": "server_start", "transport": "stdio", "api_base": settings.api_base}))
        server.run("stdio")
    except Exception:
        log.exception("Fatal error in main()")
        sys.exit(1)


if __name__ == "__main__":
    main()
