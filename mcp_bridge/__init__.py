"""MCP bridge.

This package converts between JSON-Schema-like tool descriptions and typed
local representations, and forwards tool calls across the Model Context
Protocol boundary.

Core subpackages
----------------

- ``mcp_bridge.tool``: canonical tool names and name patterns.
- ``mcp_bridge.schemas``: wire models (schema nodes, tool results, config).
- ``mcp_bridge.conversion``:

  - Schema compilation into type descriptors and generated pydantic models.
  - Serialization of local types back into schemas.
  - Generic value coercion.

- ``mcp_bridge.proxy``: remote tool clients, result classification and
  decoding, and the remote tool proxy.
- ``mcp_bridge.registry``: operation groups, tool entry building and the
  shared tool registry.
- ``mcp_bridge.core``: settings and logging configuration.

``mcp_bridge.service.BridgeService`` composes all of the above and
``mcp_bridge.server.create_server`` serves a registry over MCP.
"""

from .errors import (
    BridgeError,
    CoercionError,
    DecodeError,
    InvocationTimeoutError,
    RemoteCallError,
    RemoteToolError,
    SchemaConversionError,
    ToolExecutionError,
    UnknownOperationError,
    UnknownToolError,
)

__all__ = [
    "BridgeError",
    "CoercionError",
    "DecodeError",
    "InvocationTimeoutError",
    "RemoteCallError",
    "RemoteToolError",
    "SchemaConversionError",
    "ToolExecutionError",
    "UnknownOperationError",
    "UnknownToolError",
]
