"""Remote tool proxy.

`RemoteToolProxy` exposes the tools of one remote MCP endpoint as an
operation group. Discovery pages through ``tools/list`` sequentially and
compiles each tool's input/output schema into registered types; invocation
forwards a single ``tools/call`` and decodes the reply.

Typical usage:
    proxy = await RemoteToolProxy.create("docs", SessionToolClient(cfg))
    for sig in proxy.methods():
        print(sig.name, sig.description)
    text = await proxy.invoke("search", {"query": "hi"}, shape=DestinationShape.TEXT)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel

from mcp_bridge.conversion.coercion import to_mapping
from mcp_bridge.conversion.compiler import SchemaCompiler
from mcp_bridge.conversion.descriptor import EMPTY_OBJECT, OPEN_OBJECT, TypeDescriptor
from mcp_bridge.errors import (
    BridgeError,
    InvocationTimeoutError,
    RemoteCallError,
    SchemaConversionError,
    UnknownOperationError,
)
from mcp_bridge.registry.operations import Executable, OperationSignature
from mcp_bridge.schemas.core import ToolDescription

from .client import ToolClient
from .content import DestinationShape, classify, decode, decode_structured, tool_error


def type_name(tool_name: str) -> str:
    """``search_docs`` -> ``SearchDocs``; used as the base of synthesized type names."""
    words = [w for w in "".join(c if c.isalnum() else " " for c in tool_name).split() if w]
    return "".join(w[0].upper() + w[1:] for w in words) or "Tool"


class RemoteToolProxy:
    """Operation group forwarding calls to a remote MCP endpoint.

    Args:
        name: Group name the remote tools are exposed under.
        client: Client for the remote endpoint.
        compiler: Schema compiler owning the type registry; a private one is
            created when omitted.
        default_timeout: Seconds an invocation may take when the caller does
            not pass a timeout; ``None`` waits indefinitely.
    """

    complex_schema = False

    def __init__(
        self,
        name: str,
        client: ToolClient,
        *,
        compiler: Optional[SchemaCompiler] = None,
        default_timeout: Optional[float] = None,
    ) -> None:
        self._name = name
        self._client = client
        self._compiler = compiler or SchemaCompiler()
        self._default_timeout = default_timeout
        self._signatures: Dict[str, OperationSignature] = {}
        self._logger = logging.getLogger(__name__)

    @classmethod
    async def create(cls, name: str, client: ToolClient, **kwargs: Any) -> RemoteToolProxy:
        """Construct a proxy and run discovery."""
        proxy = cls(name, client, **kwargs)
        await proxy.discover()
        return proxy

    @property
    def name(self) -> str:
        return self._name

    @property
    def endpoint(self) -> str:
        return getattr(self._client, "endpoint", self._name)

    @property
    def compiler(self) -> SchemaCompiler:
        return self._compiler

    async def discover(self) -> List[OperationSignature]:
        """Fetch and compile the remote tool list.

        Raises:
            RemoteCallError: If any page cannot be fetched; the previously
                discovered tools are kept.
        """
        tools = await self._list_all()
        signatures: Dict[str, OperationSignature] = {}
        for tool in tools:
            if not tool.name:
                self._logger.warning("RemoteToolProxy.discover: skipping unnamed tool from %s", self.endpoint)
                continue
            signatures[tool.name] = self._signature(tool)
        self._signatures = signatures
        self._logger.debug(
            "RemoteToolProxy.discover: group=%s endpoint=%s tools=%d",
            self._name,
            self.endpoint,
            len(signatures),
        )
        return list(signatures.values())

    async def _list_all(self) -> List[ToolDescription]:
        tools: List[ToolDescription] = []
        cursor: Optional[str] = None
        while True:
            try:
                page = await self._client.list_tools(cursor)
            except BridgeError:
                raise
            except Exception as exc:
                raise RemoteCallError(self.endpoint, f"failed to list tools: {exc}") from exc
            tools.extend(page.tools)
            cursor = page.next_cursor
            if not cursor:
                return tools
            self._logger.debug("RemoteToolProxy._list_all: next page cursor=%s", cursor)

    def _signature(self, tool: ToolDescription) -> OperationSignature:
        base = type_name(tool.name)
        try:
            input_type: TypeDescriptor = self._compiler.compile_object(tool.input_schema, base + "Input")
            output_type: Optional[TypeDescriptor] = None
            if tool.output_schema is not None:
                output_type = self._compiler.compile_object(tool.output_schema, base + "Output")
        except SchemaConversionError as exc:
            self._logger.warning(
                "RemoteToolProxy._signature: falling back to permissive schema for tool=%s: %s",
                tool.name,
                exc,
            )
            input_type, output_type = OPEN_OBJECT, EMPTY_OBJECT
        return OperationSignature(
            name=tool.name,
            description=tool.description or "",
            input=input_type,
            output=output_type,
        )

    def methods(self) -> List[OperationSignature]:
        return list(self._signatures.values())

    def method(self, name: str) -> Executable:
        if name not in self._signatures:
            raise UnknownOperationError(self._name, name)

        async def run(args: Any = None) -> Any:
            return await self.invoke(name, args)

        return run

    def input_model(self, name: str) -> Optional[Type[BaseModel]]:
        """Model class generated for a discovered tool's input, if any."""
        signature = self._signatures.get(name)
        if signature is None:
            raise UnknownOperationError(self._name, name)
        return self._compiler.model_for(signature.input)

    async def invoke(
        self,
        tool_name: str,
        args: Any = None,
        *,
        shape: DestinationShape = DestinationShape.OPAQUE,
        model: Optional[Type[BaseModel]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Call a remote tool once and decode its result.

        Args:
            tool_name: Remote tool name.
            args: Arguments; a mapping, a pydantic model or anything coercible
                into a mapping.
            shape: Destination shape of the decoded result. Passing ``model``
                with the default shape implies ``STRUCTURED``.
            model: Optional pydantic model the structured result is validated into.
            timeout: Seconds to wait for the reply; defaults to the proxy's
                ``default_timeout``.

        Raises:
            CoercionError: If ``args`` cannot be turned into a mapping.
            InvocationTimeoutError: If no reply arrives in time.
            RemoteCallError: If the call fails at the transport level.
            UnknownOperationError: If ``tool_name`` was not discovered.
            RemoteToolError: If the remote tool reported an error.
            DecodeError: If the result cannot be decoded into ``shape``.
        """
        if tool_name not in self._signatures:
            raise UnknownOperationError(self._name, tool_name)
        arguments = to_mapping(args)
        wait = timeout if timeout is not None else self._default_timeout
        if model is not None and shape is DestinationShape.OPAQUE:
            shape = DestinationShape.STRUCTURED

        self._logger.debug(
            "RemoteToolProxy.invoke: endpoint=%s tool=%s args_keys=%s timeout=%s",
            self.endpoint,
            tool_name,
            list(arguments.keys()),
            wait,
        )
        try:
            result = await asyncio.wait_for(self._client.call_tool(tool_name, arguments), timeout=wait)
        except asyncio.TimeoutError as exc:
            raise InvocationTimeoutError(self.endpoint, wait or 0.0) from exc
        except BridgeError:
            raise
        except Exception as exc:
            raise RemoteCallError(self.endpoint, f"failed to call tool '{tool_name}': {exc}") from exc

        if result.is_error:
            raise tool_error(result, tool_name)
        if result.structured_content is not None:
            return decode_structured(result.structured_content, shape, model)
        return decode(classify(result.content), shape, model)
