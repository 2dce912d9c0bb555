from __future__ import annotations

from typing import Optional


class BridgeError(Exception):
    pass


class SchemaConversionError(BridgeError):
    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(f"Schema conversion failed: {message}")


class CoercionError(BridgeError):
    def __init__(self, target: object, message: str) -> None:
        self.target = target
        super().__init__(f"Cannot coerce value into {target!r}: {message}")


class UnknownToolError(BridgeError):
    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: '{tool_name}'")


class UnknownOperationError(BridgeError):
    def __init__(self, group: str, operation: str) -> None:
        self.group = group
        self.operation = operation
        super().__init__(f"Unknown operation '{operation}' in group '{group}'")


class RemoteCallError(BridgeError):
    def __init__(self, endpoint: str, message: str) -> None:
        self.endpoint = endpoint
        super().__init__(f"Remote call to '{endpoint}' failed: {message}")


class InvocationTimeoutError(RemoteCallError):
    def __init__(self, endpoint: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(endpoint, f"no response within {timeout:g}s")


class RemoteToolError(BridgeError):
    """The remote endpoint answered with ``isError`` set.

    ``str(err)`` is exactly the message extracted from the response so callers
    can surface it verbatim.
    """

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        self.message = message
        super().__init__(message)


class ToolExecutionError(BridgeError):
    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        self.message = message
        super().__init__(f"Tool '{tool_name}' failed: {message}")


class DecodeError(BridgeError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Cannot decode tool result: {message}")
