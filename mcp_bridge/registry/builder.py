"""Build tool entries from operation groups.

Each operation of a group becomes one `ToolEntry` named
``<group path with / replaced by _>-<operation>``. The entry advertises the
serialized input and output schema of the operation. When the types cannot
be serialized, or the group is flagged as having recursive types, only a
shallow input schema is advertised.

The handler coerces the request arguments into the operation's input type,
runs the operation and returns its result as one text content element.
Failures of the operation are reported as error results, not raised.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Collection, Dict, List, Optional, Tuple

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from mcp_bridge.conversion.coercion import coerce
from mcp_bridge.conversion.descriptor import TypeDescriptor
from mcp_bridge.conversion.serializer import inspect_input_shape, serialize, serialize_object
from mcp_bridge.errors import SchemaConversionError
from mcp_bridge.schemas.core import CallToolRequest, CallToolResult, SchemaNode, ToolEntry, ToolHandler
from mcp_bridge.tool.name import new_name

from .operations import Executable, OperationGroup, OperationSignature

logger = logging.getLogger(__name__)


def build_tool_entries(group: OperationGroup, complex_groups: Collection[str] = ()) -> List[ToolEntry]:
    """Turn every operation of ``group`` into a `ToolEntry`.

    Args:
        group: Operation group to expose.
        complex_groups: Names of groups whose types are recursive; their
            operations only advertise a shallow input schema.
    """
    complex_schema = group.complex_schema or group.name in complex_groups
    entries: List[ToolEntry] = []
    for signature in group.methods():
        name = new_name(group.name, signature.name)
        input_schema, output_schema = _schemas(signature, complex_schema)
        entries.append(
            ToolEntry(
                name=str(name),
                description=signature.description,
                input_schema=input_schema,
                output_schema=output_schema,
                handler=_handler(str(name), signature, group.method(signature.name)),
            )
        )
    logger.debug("build_tool_entries: group=%s entries=%d complex=%s", group.name, len(entries), complex_schema)
    return entries


def _schemas(signature: OperationSignature, complex_schema: bool) -> Tuple[SchemaNode, Optional[SchemaNode]]:
    if not complex_schema:
        try:
            input_schema = serialize_object(signature.input)
            output_schema = serialize(signature.output) if signature.output is not None else None
            return input_schema, output_schema
        except SchemaConversionError as exc:
            logger.warning(
                "build_tool_entries: using shallow input schema for operation=%s: %s",
                signature.name,
                exc,
            )
    return inspect_input_shape(signature.input), None


def _handler(tool_name: str, signature: OperationSignature, executable: Executable) -> ToolHandler:
    target = _input_target(signature.input)

    async def handle(request: CallToolRequest) -> CallToolResult:
        try:
            if target is None:
                result = await executable()
            else:
                result = await executable(coerce(request.arguments, target))
        except Exception as exc:
            logger.debug("tool handler failed: tool=%s error=%s", tool_name, exc)
            return CallToolResult.text_result(str(exc) or type(exc).__name__, is_error=True)
        return CallToolResult.text_result(result_text(result))

    return handle


def _input_target(input_type: Any) -> Any:
    if input_type is None:
        return None
    if isinstance(input_type, TypeDescriptor):
        return Dict[str, Any]
    return input_type


def result_text(result: Any) -> str:
    """Render an operation result as the text of a tool result."""
    if result is None:
        return ""
    if isinstance(result, str):
        return result
    if isinstance(result, (bytes, bytearray)):
        return bytes(result).decode("utf-8", errors="replace")
    if isinstance(result, BaseModel):
        return result.model_dump_json(by_alias=True, exclude_none=True)
    return json.dumps(to_jsonable_python(result, by_alias=True))
