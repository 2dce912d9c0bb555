from __future__ import annotations

import json
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from .base import BaseSchema, WireSchema


class SchemaKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


_SCHEMA_KINDS = frozenset(k.value for k in SchemaKind)


class SchemaNode(WireSchema):
    """JSON-Schema-like description of a value's shape.

    Only the subset the bridge understands is modelled; other keywords
    (``$schema``, ``additionalProperties``, ``title``...) are dropped on parse.
    A missing or unrecognised ``type`` leaves `kind` unset, which the compiler
    treats as "any" - except that a node carrying ``properties`` without a
    type is an object.
    """

    kind: Optional[SchemaKind] = Field(
        None,
        alias="type",
        description="Value kind. Unset means the node accepts any value.",
        examples=["object", "string"],
    )
    format: Optional[str] = Field(
        None,
        description="Format hint for string kinds, notably 'date-time' and 'date'.",
        examples=["date-time"],
    )
    properties: Optional[Dict[str, SchemaNode]] = Field(
        None,
        description="Nested schemas by property name (object kind only).",
    )
    required: Optional[List[str]] = Field(
        None,
        description="Names of properties that must be present (object kind only).",
    )
    items: Optional[SchemaNode] = Field(
        None,
        description="Element schema (array kind only).",
    )
    description: Optional[str] = Field(None, description="Human-friendly description of the value.")
    enum: Optional[List[Any]] = Field(None, description="Ordered list of allowed literal values.")

    @model_validator(mode="before")
    @classmethod
    def _infer_object_kind(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("type") is None and data.get("kind") is None:
            if isinstance(data.get("properties"), dict):
                return {**data, "type": SchemaKind.OBJECT.value}
        return data

    @field_validator("kind", mode="before")
    @classmethod
    def _lenient_kind(cls, value: Any) -> Any:
        if isinstance(value, list):
            value = next((v for v in value if isinstance(v, str) and v != "null"), None)
        if isinstance(value, SchemaKind):
            return value
        if isinstance(value, str) and value in _SCHEMA_KINDS:
            return value
        return None

    @field_validator("required", mode="before")
    @classmethod
    def _lenient_required(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return None
        return [v for v in value if isinstance(v, str)]

    @field_validator("items", mode="before")
    @classmethod
    def _lenient_items(cls, value: Any) -> Any:
        # tuple-typed arrays ("items": [...]) are not supported; treat as untyped
        if isinstance(value, dict) or isinstance(value, SchemaNode):
            return value
        return None

    def required_set(self) -> set[str]:
        return set(self.required or [])

    def to_wire(self) -> Dict[str, Any]:
        """Return the plain JSON-compatible dict, omitting unset members."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ContentKind(str, Enum):
    """Closed set of content element tags after alias resolution."""

    TEXT = "text"
    DATA = "data"
    RESOURCE = "resource"
    IMAGE = "image"
    EMPTY = ""
    OTHER = "other"


_CONTENT_ALIASES: Dict[str, ContentKind] = {
    "text": ContentKind.TEXT,
    "data": ContentKind.DATA,
    "jsondata": ContentKind.DATA,
    "resource": ContentKind.RESOURCE,
    "resource_link": ContentKind.RESOURCE,
    "image": ContentKind.IMAGE,
    "": ContentKind.EMPTY,
}


class ContentElement(WireSchema):
    """One element of a tool result's ``content`` array.

    Unknown keys are retained so elements routed to the "other" bucket can be
    dumped verbatim for diagnostics.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field("", description="Declared element type as sent by the producer.")
    mime_type: Optional[str] = Field(None, description="Declared MIME type of the payload.")
    text: Optional[str] = Field(None, description="Text payload for 'text' elements.")
    data: Optional[Any] = Field(None, description="String payload for 'data'/'image' elements (base64 for binary).")
    resource: Optional[Any] = Field(None, description="Opaque resource reference for 'resource' elements.")

    @field_validator("type", mode="before")
    @classmethod
    def _none_type(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def kind(self) -> ContentKind:
        return _CONTENT_ALIASES.get(self.type.strip().lower(), ContentKind.OTHER)

    @property
    def mime(self) -> str:
        """Lower-cased MIME type without parameters (``; charset=...``)."""
        return (self.mime_type or "").split(";", 1)[0].strip().lower()

    def payload(self) -> str:
        if self.data is None:
            return ""
        if isinstance(self.data, str):
            return self.data
        return json.dumps(self.data)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ToolDescription(WireSchema):
    name: str = Field(..., description="Tool name as advertised by the endpoint.")
    description: Optional[str] = Field(None, description="Short description of what the tool does.")
    input_schema: Dict[str, Any] = Field(default_factory=dict, description="Raw input JSON schema.")
    output_schema: Optional[Dict[str, Any]] = Field(None, description="Raw output JSON schema, when advertised.")

    @field_validator("input_schema", mode="before")
    @classmethod
    def _none_schema(cls, value: Any) -> Any:
        return {} if value is None else value


class ToolsPage(WireSchema):
    """One page of a paginated ``tools/list`` response.

    Example:
        page = await client.list_tools()
        tools = list(page.tools)
        while page.next_cursor:
            page = await client.list_tools(cursor=page.next_cursor)
            tools.extend(page.tools)
    """

    tools: List[ToolDescription] = Field(default_factory=list, description="Tools returned for the current page.")
    next_cursor: Optional[str] = Field(None, description="Opaque cursor for the next page; empty means done.")


class CallToolRequest(WireSchema):
    name: str = Field(..., description="Canonical or remote tool name.", min_length=1)
    arguments: Dict[str, Any] = Field(default_factory=dict, description="Tool arguments.")

    @field_validator("arguments", mode="before")
    @classmethod
    def _none_arguments(cls, value: Any) -> Any:
        return {} if value is None else value


class CallToolResult(WireSchema):
    content: List[ContentElement] = Field(default_factory=list, description="Result content elements.")
    is_error: bool = Field(False, description="Whether the endpoint reported a failure.")
    structured_content: Optional[Any] = Field(
        None, description="Fully structured result; preferred over content parsing when present."
    )

    @field_validator("is_error", mode="before")
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return bool(value)

    @field_validator("content", mode="before")
    @classmethod
    def _none_content(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def text_result(cls, text: str, *, is_error: bool = False) -> CallToolResult:
        return cls(content=[ContentElement(type="text", text=text)], is_error=is_error)


ToolHandler = Callable[[CallToolRequest], Awaitable[CallToolResult]]


class ToolEntry(BaseSchema):
    """A registered, invocable tool. Immutable once built."""

    name: str = Field(..., description="Canonical tool name.", min_length=1)
    description: str = Field("", description="Human-readable description of what the tool does.")
    input_schema: SchemaNode = Field(..., description="Schema of the accepted arguments.")
    output_schema: Optional[SchemaNode] = Field(None, description="Schema of the result, when known.")
    handler: ToolHandler = Field(..., description="Async handler executing the tool.")

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)


class ToolDescriptor(BaseSchema):
    name: str
    description: str = ""
