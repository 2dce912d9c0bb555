"""Operation groups.

An operation group is a named set of async operations, each described by an
`OperationSignature`. Groups are what the registry builder turns into tool
entries: local groups wrap Python callables, remote proxies expose the tools
of an MCP endpoint through the same interface.

Example:
    files = LocalOperationGroup("system/files")

    @files.operation(description="Read a file")
    async def read(req: ReadRequest) -> ReadResponse:
        ...
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, get_type_hints, runtime_checkable

from mcp_bridge.errors import UnknownOperationError

Executable = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class OperationSignature:
    """Description of one operation.

    ``input`` and ``output`` are either Python types (pydantic models,
    dataclasses, annotations) or `TypeDescriptor`s; ``None`` means the
    operation takes no input, or its output shape is unknown.
    """

    name: str
    description: str = ""
    input: Any = None
    output: Any = None


@runtime_checkable
class OperationGroup(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def complex_schema(self) -> bool: ...

    def methods(self) -> List[OperationSignature]: ...

    def method(self, name: str) -> Executable: ...


class LocalOperationGroup:
    """Operation group backed by local Python callables.

    Input and output types are taken from the callable's annotations: the
    first parameter's annotation is the input type, the return annotation the
    output type. Synchronous callables are accepted and awaited transparently.
    """

    def __init__(self, name: str, *, complex_schema: bool = False) -> None:
        self._name = name
        self._complex_schema = complex_schema
        self._signatures: Dict[str, OperationSignature] = {}
        self._executables: Dict[str, Executable] = {}
        self._logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return self._name

    @property
    def complex_schema(self) -> bool:
        return self._complex_schema

    def add(
        self,
        name: str,
        func: Callable[..., Any],
        *,
        input_type: Any = None,
        output_type: Any = None,
        description: str = "",
    ) -> OperationSignature:
        signature = OperationSignature(name=name, description=description, input=input_type, output=output_type)
        self._signatures[name] = signature
        self._executables[name] = _as_executable(func, takes_input=input_type is not None)
        self._logger.debug("LocalOperationGroup.add: group=%s operation=%s", self._name, name)
        return signature

    def operation(
        self,
        func: Optional[Callable[..., Any]] = None,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Any:
        """Decorator registering ``func`` as an operation of this group."""

        def register(f: Callable[..., Any]) -> Callable[..., Any]:
            hints = get_type_hints(f)
            params = list(inspect.signature(f).parameters)
            input_type = hints.get(params[0], Any) if params else None
            output_type = hints.get("return")
            if output_type is type(None):
                output_type = None
            self.add(
                name or f.__name__,
                f,
                input_type=input_type,
                output_type=output_type,
                description=description if description is not None else inspect.getdoc(f) or "",
            )
            return f

        if func is not None:
            return register(func)
        return register

    def methods(self) -> List[OperationSignature]:
        return list(self._signatures.values())

    def method(self, name: str) -> Executable:
        try:
            return self._executables[name]
        except KeyError:
            raise UnknownOperationError(self._name, name) from None


def _as_executable(func: Callable[..., Any], *, takes_input: bool) -> Executable:
    async def run(value: Any = None) -> Any:
        result = func(value) if takes_input else func()
        if inspect.isawaitable(result):
            result = await result
        return result

    return run
