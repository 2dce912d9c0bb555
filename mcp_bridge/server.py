"""Expose a `ToolRegistry` as an MCP server.

The registry's tools are advertised through the low-level `mcp` server
(``tools/list`` and ``tools/call``). Only input schemas are advertised; the
output schema of a tool stays available through `ToolRegistry.metadata`.

Typical usage:
    server = create_server(service.tools, name="mcp-bridge")
    async with stdio_server() as (read, write):
        await server.run(read, write, server.create_initialization_options())
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import mcp.types as types
from mcp.server.lowlevel import Server

from mcp_bridge.errors import ToolExecutionError
from mcp_bridge.registry.registry import ToolRegistry
from mcp_bridge.schemas.core import CallToolRequest, ContentElement, ContentKind, ToolEntry

logger = logging.getLogger(__name__)

McpContent = Union[types.TextContent, types.ImageContent]


def to_mcp_tool(entry: ToolEntry) -> types.Tool:
    return types.Tool(
        name=entry.name,
        description=entry.description or None,
        inputSchema=entry.input_schema.to_wire(),
    )


def to_mcp_content(element: ContentElement) -> McpContent:
    if element.mime.startswith("image/") and element.payload():
        return types.ImageContent(type="image", data=element.payload(), mimeType=element.mime)
    if element.kind is ContentKind.TEXT or element.text is not None:
        return types.TextContent(type="text", text=element.text or "")
    return types.TextContent(type="text", text=element.payload())


def create_server(registry: ToolRegistry, name: str = "mcp-bridge", *, timeout: Optional[float] = None) -> Server:
    """Build an MCP server serving the tools currently held by ``registry``.

    The registry is read on every request, so tools registered after the
    server was created are served too.
    """
    server: Server = Server(name)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [to_mcp_tool(entry) for entry in registry.entries()]

    @server.call_tool()
    async def call_tool(tool_name: str, arguments: Optional[Dict[str, Any]]) -> List[McpContent]:
        entry = registry.lookup(tool_name)
        logger.debug("call_tool: tool=%s args_keys=%s", tool_name, list((arguments or {}).keys()))
        request = CallToolRequest(name=tool_name, arguments=arguments or {})
        result = await asyncio.wait_for(entry.handler(request), timeout=timeout)
        if result.is_error:
            message = next((e.text for e in result.content if e.text), "tool returned error without content")
            raise ToolExecutionError(tool_name, message)
        return [to_mcp_content(e) for e in result.content]

    return server
