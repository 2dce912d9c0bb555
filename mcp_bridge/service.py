"""Bridge service.

`BridgeService` wires the pieces together: it owns the schema compiler (and
with it the type registry) and the shared tool registry, registers local
operation groups and remote MCP endpoints, and executes tools by canonical
name.

Typical usage:
    service = BridgeService()
    service.register_group(files)
    await service.connect_servers()
    output = await service.execute_tool("system/files.read", {"path": "README.md"})
    service.shutdown()
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from mcp_bridge.conversion.compiler import SchemaCompiler
from mcp_bridge.conversion.type_registry import TypeRegistry
from mcp_bridge.core.config import BridgeSettings, get_settings
from mcp_bridge.errors import BridgeError
from mcp_bridge.proxy.client import SessionToolClient, ToolClient
from mcp_bridge.proxy.proxy import RemoteToolProxy
from mcp_bridge.registry.operations import OperationGroup
from mcp_bridge.registry.registry import ToolRegistry
from mcp_bridge.schemas.config import RemoteServerConfig
from mcp_bridge.tool.name import canonical


class BridgeService:
    def __init__(self, settings: Optional[BridgeSettings] = None) -> None:
        self._settings = settings or get_settings()
        self._compiler = SchemaCompiler(deduplicate=self._settings.deduplicate_types)
        self._tools = ToolRegistry()
        self._proxies: List[RemoteToolProxy] = []
        self._closed = False
        self._logger = logging.getLogger(__name__)

    @property
    def settings(self) -> BridgeSettings:
        return self._settings

    @property
    def compiler(self) -> SchemaCompiler:
        return self._compiler

    @property
    def types(self) -> TypeRegistry:
        return self._compiler.registry

    @property
    def tools(self) -> ToolRegistry:
        return self._tools

    @property
    def proxies(self) -> List[RemoteToolProxy]:
        return list(self._proxies)

    def register_group(self, group: OperationGroup) -> int:
        """Register the operations of ``group`` as tools.

        Returns:
            Number of tools added; operations whose tool name is already
            registered are skipped.
        """
        added = self._tools.register_group(group, self._settings.complex_groups)
        self._logger.info("Registered group %s: %d tool(s)", group.name, added)
        return added

    async def register_remote(self, name: str, client: ToolClient) -> RemoteToolProxy:
        """Discover the tools of a remote endpoint and register them under ``name``.

        Raises:
            RemoteCallError: If discovery fails.
        """
        proxy = await RemoteToolProxy.create(
            name,
            client,
            compiler=self._compiler,
            default_timeout=self._settings.default_timeout_seconds,
        )
        self._proxies.append(proxy)
        self.register_group(proxy)
        return proxy

    async def connect_servers(self, servers: Optional[Sequence[RemoteServerConfig]] = None) -> List[RemoteToolProxy]:
        """Register every configured remote server.

        With ``fail_on_remote_error`` disabled, servers whose discovery fails
        are logged and skipped.
        """
        configs = list(servers) if servers is not None else list(self._settings.servers)
        proxies: List[RemoteToolProxy] = []
        for config in configs:
            try:
                proxies.append(await self.register_remote(config.name, SessionToolClient(config)))
            except BridgeError as exc:
                if self._settings.fail_on_remote_error:
                    raise
                self._logger.warning("Skipping remote server %s: %s", config.name, exc)
        return proxies

    async def execute_tool(self, name: str, args: Any = None, *, timeout: Optional[float] = None) -> str:
        """Execute a tool by canonical or hierarchical name (``group/path.method``).

        Raises:
            UnknownToolError: If no such tool is registered.
            ToolExecutionError: If the tool reports an error.
            InvocationTimeoutError: If the tool does not finish in time.
        """
        tool_name = canonical(name)
        wait = timeout if timeout is not None else self._settings.default_timeout_seconds
        return await self._tools.execute(tool_name, args, timeout=wait)

    def shutdown(self) -> None:
        """Release registered tools and synthesized types. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._tools.clear()
        self._compiler.registry.clear()
        self._proxies.clear()
        self._logger.info("Bridge service shut down")
