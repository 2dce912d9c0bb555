"""Schema compiler: SchemaNode -> TypeDescriptor.

Typical usage:
    compiler = SchemaCompiler()
    descriptor = compiler.compile_object(tool.input_schema, name="EchoInput")
    Model = compiler.model_for(descriptor)
    value = Model.model_validate({"message": "hi"})

Kind mapping:
- ``string`` -> text, or timestamp when ``format`` is ``date-time``/``date``
- ``integer`` -> 64-bit integer, ``number`` -> float, ``boolean`` -> bool
- ``object`` -> fields sorted by property name, optional unless ``required``
- ``array`` -> homogeneous list of ``items`` (any when absent)
- missing or unknown kind -> any
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Type, Union

from pydantic import BaseModel, PydanticUserError, ValidationError

from mcp_bridge.errors import DecodeError, SchemaConversionError
from mcp_bridge.schemas.core import SchemaKind, SchemaNode

from .descriptor import (
    ANY,
    FieldDescriptor,
    TypeDescriptor,
    TypeKind,
    array_of,
    field_name,
    object_of,
)
from .models import dump_model
from .type_registry import TypeRegistry

SchemaLike = Union[SchemaNode, Mapping[str, Any], None]

TIMESTAMP_FORMATS = ("date-time", "date")

_SCALARS = {
    SchemaKind.INTEGER: TypeKind.INTEGER,
    SchemaKind.NUMBER: TypeKind.NUMBER,
    SchemaKind.BOOLEAN: TypeKind.BOOLEAN,
}


def as_schema_node(schema: SchemaLike) -> SchemaNode:
    """Parse a raw schema mapping into a `SchemaNode`.

    Raises:
        SchemaConversionError: If the mapping is structurally invalid, e.g. a
            property definition is not itself a schema object.
    """
    if schema is None:
        return SchemaNode()
    if isinstance(schema, SchemaNode):
        return schema
    if not isinstance(schema, Mapping):
        raise SchemaConversionError(f"expected a schema object, got {type(schema).__name__}")
    try:
        return SchemaNode.model_validate(dict(schema))
    except ValidationError as exc:
        raise SchemaConversionError(str(exc)) from exc


class SchemaCompiler:
    """Compile schema nodes into registered type descriptors.

    Every object type synthesized along the way is registered in the
    compiler's `TypeRegistry`, which owns the materialized pydantic models.
    """

    def __init__(self, registry: Optional[TypeRegistry] = None, *, deduplicate: bool = False) -> None:
        self._registry = registry if registry is not None else TypeRegistry(deduplicate=deduplicate)
        self._logger = logging.getLogger(__name__)

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    def compile(self, schema: SchemaLike, name: str = "Value") -> TypeDescriptor:
        node = as_schema_node(schema)
        return self._compile(node, name, name)

    def compile_object(self, schema: SchemaLike, name: str = "Object") -> TypeDescriptor:
        """Compile a tool input/output schema into an object descriptor.

        The node's properties are used regardless of its declared kind; a
        schema without properties yields an empty object type.
        """
        node = as_schema_node(schema)
        descriptor = self._object(node, name, name)
        self._logger.debug(
            "SchemaCompiler.compile_object: name=%s fields=%s",
            descriptor.name,
            [f.source_name for f in descriptor.fields],
        )
        return descriptor

    def model_for(self, descriptor: TypeDescriptor) -> Optional[Type[BaseModel]]:
        """Return the pydantic model registered for an object descriptor."""
        entry = self._registry.find(descriptor)
        return entry.model if entry is not None else None

    def load_payload(self, schema: SchemaLike, payload: Union[str, bytes, Mapping[str, Any]], name: str = "Payload") -> BaseModel:
        """Compile ``schema`` and validate ``payload`` into an instance of the generated model.

        Raises:
            SchemaConversionError: If the schema is structurally invalid.
            DecodeError: If the payload is not valid JSON or does not fit the schema.
        """
        descriptor = self.compile_object(schema, name)
        model = self.model_for(descriptor)
        if model is None:  # pragma: no cover - compile_object always registers
            raise SchemaConversionError(f"type {descriptor.name!r} is not registered")
        try:
            if isinstance(payload, (str, bytes)):
                return model.model_validate_json(payload)
            return model.model_validate(dict(payload))
        except ValidationError as exc:
            raise DecodeError(f"payload does not match {descriptor.name}: {exc}") from exc

    def _compile(self, node: SchemaNode, name: str, path: str) -> TypeDescriptor:
        kind = node.kind
        extra: Dict[str, Any] = {
            "description": node.description,
            "enum": tuple(node.enum or ()),
        }
        if kind is SchemaKind.OBJECT:
            return self._object(node, name, path)
        if kind is SchemaKind.ARRAY:
            items = self._compile(node.items, name + "Item", path + "[]") if node.items is not None else None
            return array_of(items, **extra)
        if kind is SchemaKind.STRING:
            if node.format in TIMESTAMP_FORMATS:
                return TypeDescriptor(TypeKind.TIMESTAMP, format=node.format, **extra)
            return TypeDescriptor(TypeKind.STRING, format=node.format, **extra)
        if kind in _SCALARS:
            return TypeDescriptor(_SCALARS[kind], format=node.format, **extra)
        if kind is None:
            return TypeDescriptor(TypeKind.ANY, format=node.format, **extra) if (node.description or node.enum) else ANY
        raise SchemaConversionError(f"unsupported kind {kind!r}", path=path)  # pragma: no cover

    def _object(self, node: SchemaNode, name: str, path: str) -> TypeDescriptor:
        required = node.required_set()
        taken: set[str] = set()
        fields = []
        for prop in sorted(node.properties or {}):
            child = (node.properties or {})[prop]
            ident = field_name(prop, taken)
            try:
                child_type = self._compile(child, name + ident.replace("_", ""), f"{path}.{prop}")
            except ValueError as exc:
                raise SchemaConversionError(str(exc), path=f"{path}.{prop}") from exc
            fields.append(
                FieldDescriptor(
                    name=ident,
                    source_name=prop,
                    type=child_type,
                    optional=prop not in required,
                )
            )
        descriptor = object_of(fields, description=node.description, enum=tuple(node.enum or ()))
        try:
            return self._registry.register(descriptor, name).descriptor
        except (PydanticUserError, TypeError, ValueError) as exc:
            raise SchemaConversionError(f"cannot build model {name}: {exc}", path=path) from exc


def dump_payload(value: Any) -> str:
    """Serialize a value produced by `SchemaCompiler.load_payload` back to JSON."""
    if value is None:
        raise ValueError("invalid value: None")
    if isinstance(value, BaseModel):
        return json.dumps(dump_model(value))
    return json.dumps(value)
