"""Remote tool proxying: clients, content decoding and the proxy itself."""

from .client import (
    AsyncMCPTransport,
    SessionToolClient,
    SseMCPTransport,
    StreamableHttpMCPTransport,
    ToolClient,
    transport_for,
)
from .content import DestinationShape, ResultBuckets, classify, decode, decode_structured, tool_error
from .proxy import RemoteToolProxy, type_name

__all__ = [
    "AsyncMCPTransport",
    "DestinationShape",
    "RemoteToolProxy",
    "ResultBuckets",
    "SessionToolClient",
    "SseMCPTransport",
    "StreamableHttpMCPTransport",
    "ToolClient",
    "classify",
    "decode",
    "decode_structured",
    "tool_error",
    "transport_for",
    "type_name",
]
