"""Remote tool clients.

`ToolClient` is the narrow interface the proxy needs from a remote endpoint:
one page of ``tools/list`` and one ``tools/call``. `SessionToolClient`
implements it on top of the official `mcp` SDK, opening a short-lived
`ClientSession` per call through an `AsyncMCPTransport`.

Typical usage:
    from mcp_bridge.schemas.config import RemoteServerConfig

    client = SessionToolClient(RemoteServerConfig(name="docs", endpoint_url="http://localhost:8000/mcp/"))
    page = await client.list_tools()
    res = await client.call_tool("search", {"query": "hi"})
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Protocol

from mcp import ClientSession
from mcp.client.sse import sse_client
from mcp.client.streamable_http import streamablehttp_client

from mcp_bridge.schemas.config import RemoteServerConfig, TransportType
from mcp_bridge.schemas.core import CallToolResult, ToolsPage


class ToolClient(Protocol):
    """Client for one remote tool endpoint."""

    @property
    def endpoint(self) -> str: ...

    async def list_tools(self, cursor: Optional[str] = None) -> ToolsPage: ...

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> CallToolResult: ...


class AsyncMCPTransport(Protocol):
    """Protocol for creating MCP ClientSession connections asynchronously.

    Implementations return an async context manager via ``session(endpoint_url, headers)``
    that yields an initialized ``ClientSession``.
    """

    def session(self, endpoint_url: str, headers: Optional[Dict[str, str]] = None):  # -> AsyncContextManager[ClientSession]
        ...


class StreamableHttpMCPTransport(AsyncMCPTransport):
    """MCP transport using the streamable HTTP client."""

    def session(self, endpoint_url: str, headers: Optional[Dict[str, str]] = None):
        @asynccontextmanager
        async def _cm() -> AsyncIterator[ClientSession]:
            async with streamablehttp_client(endpoint_url, headers=headers) as (read_stream, write_stream, _close_fn):
                async with ClientSession(read_stream, write_stream) as session:
                    await session.initialize()
                    yield session

        return _cm()


class SseMCPTransport(AsyncMCPTransport):
    """MCP transport using the SSE client (MCP over SSE)."""

    def session(self, endpoint_url: str, headers: Optional[Dict[str, str]] = None):
        @asynccontextmanager
        async def _cm() -> AsyncIterator[ClientSession]:
            async with sse_client(endpoint_url, headers=headers) as (read_stream, write_stream):
                async with ClientSession(read_stream, write_stream) as session:
                    await session.initialize()
                    yield session

        return _cm()


def transport_for(transport: TransportType) -> AsyncMCPTransport:
    if transport is TransportType.SSE:
        return SseMCPTransport()
    return StreamableHttpMCPTransport()


class SessionToolClient:
    """`ToolClient` backed by short-lived MCP client sessions.

    A new session is created per call, which keeps the client stateless; the
    SDK result objects are converted into the bridge's wire schemas.
    """

    def __init__(self, config: RemoteServerConfig, *, transport: Optional[AsyncMCPTransport] = None) -> None:
        self._config = config
        self._transport = transport or transport_for(config.transport)
        self._logger = logging.getLogger(__name__)

    @property
    def endpoint(self) -> str:
        return self._config.endpoint_url

    @property
    def config(self) -> RemoteServerConfig:
        return self._config

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self._config.auth_token:
            headers["Authorization"] = self._config.auth_token
        return headers

    @asynccontextmanager
    async def _open_session(self) -> AsyncIterator[ClientSession]:
        base = self._config.endpoint_url.rstrip("/")
        async with self._transport.session(base, self._headers() or None) as session:
            yield session

    async def list_tools(self, cursor: Optional[str] = None) -> ToolsPage:
        async with self._open_session() as session:
            self._logger.debug(
                "SessionToolClient.list_tools: server=%s cursor=%s",
                self._config.name,
                cursor,
            )
            resp = await session.list_tools(cursor=cursor)
        return ToolsPage.model_validate(resp.model_dump(by_alias=True, mode="json", exclude_none=True))

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> CallToolResult:
        async with self._open_session() as session:
            self._logger.debug(
                "SessionToolClient.call_tool: server=%s tool=%s args_keys=%s",
                self._config.name,
                name,
                list((arguments or {}).keys()),
            )
            resp = await session.call_tool(name, arguments or {})
        return CallToolResult.model_validate(resp.model_dump(by_alias=True, mode="json", exclude_none=True))
