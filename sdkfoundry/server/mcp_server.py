# SDKFoundry MCP Server - JSON-RPC 2.0 over stdio
# Serves lookups over the ingested knowledge cache as Model Context Protocol tools

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .. import __version__
from ..config import Settings, get_settings
from ..observability import TelemetrySink, setup_logging
from .cache_loader import CacheNotFoundError, KnowledgeCache
from .tools import ToolContext, dispatch, tool_definitions

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
INTERNAL_ERROR = -32603


@dataclass
class JSONRPCError(Exception):
    code: int
    message: str


class MCPServer:
    def __init__(self, cache: KnowledgeCache, telemetry: Optional[TelemetrySink] = None,
                 context: Optional[ToolContext] = None):
        self.cache = cache
        self.telemetry = telemetry
        self.context = context or ToolContext(cache)
        self.capabilities = {
            "tools": {}
        }
        self.server_info = {
            "name": "sdkfoundry-mcp",
            "version": __version__
        }
        self.session_initialized = False

    async def handle_initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle MCP initialize request"""
        client_info = params.get("clientInfo", {})
        logger.info(f"Initializing MCP session with client: {client_info.get('name', 'unknown')}")

        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": self.capabilities,
            "serverInfo": self.server_info
        }

    async def handle_initialized(self, params: Dict[str, Any]) -> None:
        """Handle MCP initialized notification"""
        self.session_initialized = True
        logger.info("MCP session initialized successfully")

    async def handle_tools_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": tool_definitions()}

    async def handle_tools_call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a tool. Tool failures are reported as text content, not JSON-RPC errors."""
        name = params.get("name")
        if not name:
            raise JSONRPCError(INVALID_REQUEST, "Missing tool name")
        arguments = params.get("arguments")

        if self.telemetry is not None:
            self.telemetry.record(name, arguments if isinstance(arguments, dict) else None)

        return dispatch(self.context, name, arguments)

    async def handle_request(self, request_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Main request handler following JSON-RPC 2.0"""
        request_id: Union[str, int, None] = request_data.get("id") if isinstance(request_data, dict) else None

        try:
            if not isinstance(request_data, dict) or request_data.get("jsonrpc") != "2.0":
                raise JSONRPCError(INVALID_REQUEST, "Invalid JSON-RPC version")

            method = request_data.get("method")
            params = request_data.get("params") or {}

            if not method:
                raise JSONRPCError(INVALID_REQUEST, "Missing method")

            if method in ("initialized", "notifications/initialized"):
                await self.handle_initialized(params)
                return None  # Notification, no response
            elif method.startswith("notifications/"):
                return None
            elif method == "initialize":
                result = await self.handle_initialize(params)
            elif method == "ping":
                result = {}
            elif method == "tools/list":
                result = await self.handle_tools_list(params)
            elif method == "tools/call":
                result = await self.handle_tools_call(params)
            else:
                raise ValueError(f"Unknown method: {method}")

            return {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": result
            }

        except JSONRPCError as e:
            logger.warning(f"Rejected request: {e.message}")
            return self._error(request_id, e.code, e.message)
        except Exception as e:
            logger.error(f"Error handling request: {e}")
            return self._error(request_id, INTERNAL_ERROR, str(e))

    @staticmethod
    def _error(request_id, code: int, message: str) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {
                "code": code,
                "message": message
            }
        }

    async def handle_line(self, line: str) -> Optional[Dict[str, Any]]:
        try:
            request_data = json.loads(line)
        except json.JSONDecodeError as e:
            return self._error(None, PARSE_ERROR, f"Parse error: {e}")
        return await self.handle_request(request_data)


def build_server(settings: Optional[Settings] = None) -> MCPServer:
    """Load the cache eagerly so a missing cache fails at startup.

    Raises:
        CacheNotFoundError: a partition is missing.
    """
    settings = settings or get_settings()
    cache = KnowledgeCache(settings=settings)
    cache.load()
    telemetry = TelemetrySink(settings.telemetry_file)
    return MCPServer(cache, telemetry)


async def serve_stdio(server: MCPServer, stdin=None, stdout=None) -> None:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    loop = asyncio.get_running_loop()

    logger.info("SDKFoundry MCP server running on stdio")
    while True:
        line = await loop.run_in_executor(None, stdin.readline)
        if not line:
            break
        if not line.strip():
            continue

        response = await server.handle_line(line.strip())
        if response:  # Don't send response for notifications
            stdout.write(json.dumps(response) + "\n")
            stdout.flush()


def run(argv=None) -> int:
    parser = argparse.ArgumentParser(description="SDKFoundry MCP server (stdio)")
    parser.add_argument('--cache-dir', help="Cache directory (default from configuration)")
    parser.add_argument('--log-level', default=None, help="Logging level")
    args = parser.parse_args(argv)

    settings = Settings(overrides={'cache_dir': args.cache_dir}) if args.cache_dir else get_settings()
    # stdout carries protocol frames
    setup_logging(level=args.log_level or settings.get('logging.level', 'INFO'), stream=sys.stderr,
                  log_file=settings.get('logging.file'), use_colors=False)

    try:
        server = build_server(settings)
    except CacheNotFoundError as e:
        print(f"Fatal: {e}", file=sys.stderr)
        return 1

    asyncio.run(serve_stdio(server))
    return 0


if __name__ == "__main__":
    sys.exit(run())
