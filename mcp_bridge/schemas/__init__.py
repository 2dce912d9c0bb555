from .config import RemoteServerConfig, TransportType
from .core import (
    CallToolRequest,
    CallToolResult,
    ContentElement,
    ContentKind,
    SchemaKind,
    SchemaNode,
    ToolDescription,
    ToolEntry,
    ToolsPage,
)

__all__ = [
    "CallToolRequest",
    "CallToolResult",
    "ContentElement",
    "ContentKind",
    "RemoteServerConfig",
    "SchemaKind",
    "SchemaNode",
    "ToolDescription",
    "ToolEntry",
    "ToolsPage",
    "TransportType",
]
