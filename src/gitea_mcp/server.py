"""MCP server wiring for gitea-mcp.

Advertises every registered tool, routes calls through ``dispatch_tool`` and serializes the
resulting envelope as JSON text. stdout carries the protocol, so all logging goes to stderr.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool

from . import __version__
from .errors import SafeError
from .response import internal_error
from .tools import TOOL_REGISTRY, dispatch_tool, initialize_runtime_from_env

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)

SERVER_NAME = "gitea-mcp"
STATUS_URI = "gitea-mcp://server-status"
CAPABILITIES_URI = "gitea-mcp://capabilities"

server = Server(SERVER_NAME)


def _tools() -> list[Tool]:
    return [
        Tool(name=d.name, description=d.description, inputSchema=d.input_schema)
        for d in TOOL_REGISTRY.values()
    ]


def _resources() -> list[Resource]:
    return [
        Resource(
            uri=STATUS_URI,
            name="Server Status",
            description="Non-secret server configuration and limits",
        ),
        Resource(
            uri=CAPABILITIES_URI,
            name="Capabilities",
            description="Available tools and how they resolve the target repository",
        ),
    ]


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    tools = _tools()
    logger.info("Listed %s tools", len(tools))
    return tools


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Execute a tool and return MCP-compliant TextContent."""
    if not isinstance(arguments, dict):
        arguments = {}

    logger.info("Tool called: %s", name)

    try:
        raw_result = await dispatch_tool(name, arguments)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.error("Tool %s failed: %s", name, type(exc).__name__)
        raw_result = internal_error("Tool execution failed")
    return [TextContent(type="text", text=json.dumps(raw_result, indent=2, default=str))]


@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return _resources()


@server.read_resource()
async def read_resource(uri: Any) -> str:
    """Read resource content."""
    uri_s = uri if isinstance(uri, str) else str(uri)

    if uri_s == CAPABILITIES_URI:
        caps = {
            "server": SERVER_NAME,
            "version": __version__,
            "repository_scoped_tools": sorted(n for n, d in TOOL_REGISTRY.items() if d.repo_scoped),
            "repository_free_tools": sorted(n for n, d in TOOL_REGISTRY.items() if not d.repo_scoped),
            "repository_resolution": [
                "owner + repo when both are given",
                "git remote of directory (origin, else first remote)",
                "git remote of GITEA_DEFAULT_DIRECTORY",
            ],
            "behavior": {"retries": False, "caching": False, "list_all_pages": True},
        }
        return json.dumps(caps, indent=2)

    if uri_s == STATUS_URI:
        status: dict[str, Any] = {
            "server": SERVER_NAME,
            "version": __version__,
            "tools_available": len(TOOL_REGISTRY),
            "configured": False,
        }
        try:
            runtime = initialize_runtime_from_env()
            limits = runtime.config.limits
            status["configured"] = True
            status["forge_url"] = runtime.config.base_url
            status["default_directory_set"] = runtime.config.default_directory is not None
            status["limits"] = {
                "total_timeout_s": limits.total_timeout_s,
                "default_page_size": limits.default_page_size,
                "max_page_size": limits.max_page_size,
                "max_pages": limits.max_pages,
                "file_max_bytes": limits.file_max_bytes,
            }
            status["audit"] = {"file_sink_enabled": runtime.config.audit_log_path is not None}
        except SafeError as exc:
            status["configuration_error"] = exc.message

        return json.dumps(status, indent=2)

    return json.dumps({"ok": False, "code": "NotFound", "message": "Unknown resource"}, indent=2)


async def run_server() -> None:
    """Run the server over stdio."""
    # Fail fast on invalid/missing host configuration.
    try:
        runtime = initialize_runtime_from_env()
    except SafeError as exc:
        logger.error("Startup configuration error: %s", exc.message)
        raise
    logger.info("Serving %s tools for %s", len(TOOL_REGISTRY), runtime.config.base_url)

    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


async def test_server() -> None:
    """Lightweight self-test to ensure tool/resource listing works."""
    tools = _tools()
    resources = _resources()
    print(f"OK: {len(tools)} tools, {len(resources)} resources", file=sys.stderr)
