from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import BaseSchema


class TransportType(str, Enum):
    STREAMABLE_HTTP = "streamable_http"
    SSE = "sse"


class RemoteServerConfig(BaseSchema):
    name: str = Field(
        ...,
        description="Group name the remote tools are registered under (path segments separated by '/').",
        min_length=1,
        max_length=128,
        examples=["clickup", "github/issues"],
    )
    endpoint_url: str = Field(
        ...,
        description="Endpoint URL of the MCP server (streamable HTTP preferred, SSE kept for compatibility).",
        examples=["http://clickup-mcp:8000/mcp/", "http://localhost:8082/sse"],
        min_length=1,
        max_length=512,
    )
    transport: TransportType = Field(
        TransportType.STREAMABLE_HTTP,
        description="Transport used to open MCP sessions with the endpoint.",
        examples=[TransportType.STREAMABLE_HTTP],
    )
    auth_token: Optional[str] = Field(
        None,
        description="Optional value sent as Authorization header when connecting to the server.",
        examples=["Bearer ghp_exampletoken"],
        min_length=1,
        max_length=512,
    )
    request_timeout_seconds: float = Field(
        30.0,
        description="HTTP timeout in seconds used by the transport when opening sessions.",
        ge=0.1,
        le=600.0,
        examples=[10.0, 30.0],
    )
