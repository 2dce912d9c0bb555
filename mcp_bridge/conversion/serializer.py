"""Schema serializer: local types -> SchemaNode.

The inverse of the compiler. Local operations are described by pydantic
models (or dataclasses, plain annotations, example values); this module turns
those descriptions into the `SchemaNode` advertised as a tool's input/output
schema.

`inspect_input_shape` is the shallow fallback used for operations whose types
reference themselves: it only looks at the top-level fields and never
descends into nested types.
"""

from __future__ import annotations

import dataclasses
import enum
import types
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import (
    Annotated,
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from pydantic import BaseModel

from mcp_bridge.errors import SchemaConversionError
from mcp_bridge.schemas.core import SchemaKind, SchemaNode

from .descriptor import TypeDescriptor, TypeKind

_DESCRIPTOR_KINDS: Dict[TypeKind, Optional[SchemaKind]] = {
    TypeKind.STRING: SchemaKind.STRING,
    TypeKind.INTEGER: SchemaKind.INTEGER,
    TypeKind.NUMBER: SchemaKind.NUMBER,
    TypeKind.BOOLEAN: SchemaKind.BOOLEAN,
    TypeKind.TIMESTAMP: SchemaKind.STRING,
    TypeKind.ANY: None,
    TypeKind.OBJECT: SchemaKind.OBJECT,
    TypeKind.ARRAY: SchemaKind.ARRAY,
}

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, Sequence)
_MAPPING_ORIGINS = (dict, Mapping)


def serialize(source: Any) -> SchemaNode:
    """Describe ``source`` as a `SchemaNode`.

    ``source`` may be a `TypeDescriptor`, a pydantic model class, a dataclass,
    a supported type annotation (``str``, ``Optional[int]``, ``List[Model]``,
    ``Dict[str, Any]``, ``Literal[...]``, an ``Enum`` subclass, ``datetime``...)
    or an example value.

    Raises:
        SchemaConversionError: If a model type references itself, or the
            annotation is not supported.
    """
    if isinstance(source, TypeDescriptor):
        return _from_descriptor(source)
    if _is_annotation(source):
        return _from_annotation(source, ())
    return _from_value(source)


def serialize_object(source: Any) -> SchemaNode:
    """Like `serialize`, but the result must describe an object.

    ``None`` yields an empty object schema.
    """
    if source is None:
        return SchemaNode(kind=SchemaKind.OBJECT, properties={})
    node = serialize(source)
    if node.kind is not SchemaKind.OBJECT:
        raise SchemaConversionError(f"expected an object type, got {node.kind.value if node.kind else 'any'}")
    return node


def inspect_input_shape(source: Any) -> SchemaNode:
    """Shallow object schema built from the top-level fields of ``source`` only.

    Nested objects and arrays are described by their kind alone. Sources that
    are not models or dataclasses yield an object schema without properties.
    """
    properties: Dict[str, SchemaNode] = {}
    required: List[str] = []
    for name, annotation, is_required, description in _fields_of(source):
        properties[name] = SchemaNode(kind=_shallow_kind(annotation), description=description)
        if is_required:
            required.append(name)
    return SchemaNode(kind=SchemaKind.OBJECT, properties=properties, required=required or None)


def _from_descriptor(descriptor: TypeDescriptor) -> SchemaNode:
    kind = _DESCRIPTOR_KINDS[descriptor.kind]
    node: Dict[str, Any] = {
        "kind": kind,
        "format": descriptor.format,
        "description": descriptor.description,
        "enum": list(descriptor.enum) if descriptor.enum else None,
    }
    if descriptor.kind is TypeKind.TIMESTAMP and not descriptor.format:
        node["format"] = "date-time"
    if descriptor.is_object:
        node["properties"] = {f.source_name: _from_descriptor(f.type) for f in descriptor.fields}
        node["required"] = [f.source_name for f in descriptor.fields if not f.optional] or None
    elif descriptor.is_array and descriptor.items is not None:
        node["items"] = _from_descriptor(descriptor.items)
    return SchemaNode(**node)


def _is_annotation(source: Any) -> bool:
    return source is Any or isinstance(source, type) or get_origin(source) is not None


def _from_annotation(annotation: Any, stack: Tuple[type, ...], description: Optional[str] = None) -> SchemaNode:
    if annotation is Any or annotation is object:
        return SchemaNode(description=description)

    origin = get_origin(annotation)
    if origin is Annotated:
        return _from_annotation(get_args(annotation)[0], stack, description)
    if origin is Union or origin is types.UnionType:
        members = [a for a in get_args(annotation) if a is not type(None)]
        if len(members) == 1:
            return _from_annotation(members[0], stack, description)
        return SchemaNode(description=description)
    if origin is Literal:
        values = list(get_args(annotation))
        return SchemaNode(kind=_kind_of_value(values[0]) if values else None, enum=values, description=description)
    if origin in _SEQUENCE_ORIGINS:
        args = [a for a in get_args(annotation) if a is not Ellipsis]
        items = _from_annotation(args[0], stack) if args else None
        return SchemaNode(kind=SchemaKind.ARRAY, items=items, description=description)
    if origin in _MAPPING_ORIGINS or annotation in _MAPPING_ORIGINS:
        return SchemaNode(kind=SchemaKind.OBJECT, properties={}, description=description)
    if annotation in _SEQUENCE_ORIGINS:
        return SchemaNode(kind=SchemaKind.ARRAY, description=description)

    if not isinstance(annotation, type):
        raise SchemaConversionError(f"unsupported annotation {annotation!r}")
    if issubclass(annotation, enum.Enum):
        values = [m.value for m in annotation]
        return SchemaNode(kind=_kind_of_value(values[0]) if values else None, enum=values, description=description)
    if issubclass(annotation, bool):
        return SchemaNode(kind=SchemaKind.BOOLEAN, description=description)
    if issubclass(annotation, int):
        return SchemaNode(kind=SchemaKind.INTEGER, description=description)
    if issubclass(annotation, float):
        return SchemaNode(kind=SchemaKind.NUMBER, description=description)
    if issubclass(annotation, (str, bytes)):
        return SchemaNode(kind=SchemaKind.STRING, description=description)
    if issubclass(annotation, datetime):
        return SchemaNode(kind=SchemaKind.STRING, format="date-time", description=description)
    if issubclass(annotation, date):
        return SchemaNode(kind=SchemaKind.STRING, format="date", description=description)
    if _is_structured(annotation):
        return _from_structured(annotation, stack, description)
    raise SchemaConversionError(f"unsupported type {annotation.__name__}")


def _from_structured(cls: type, stack: Tuple[type, ...], description: Optional[str]) -> SchemaNode:
    if cls in stack:
        path = " -> ".join(c.__name__ for c in stack + (cls,))
        raise SchemaConversionError(f"recursive type reference {path}")
    stack = stack + (cls,)
    properties: Dict[str, SchemaNode] = {}
    required: List[str] = []
    for name, annotation, is_required, field_description in _fields_of(cls):
        properties[name] = _from_annotation(annotation, stack, field_description)
        if is_required:
            required.append(name)
    return SchemaNode(
        kind=SchemaKind.OBJECT,
        properties=properties,
        required=required or None,
        description=description,
    )


def _from_value(value: Any) -> SchemaNode:
    if value is None:
        return SchemaNode()
    if isinstance(value, BaseModel) or dataclasses.is_dataclass(value):
        return _from_annotation(type(value), ())
    if isinstance(value, Mapping):
        properties = {str(k): _from_value(v) for k, v in value.items()}
        return SchemaNode(kind=SchemaKind.OBJECT, properties=properties, required=sorted(properties) or None)
    if isinstance(value, (list, tuple, set, frozenset)):
        first = next(iter(value), None)
        return SchemaNode(kind=SchemaKind.ARRAY, items=_from_value(first) if first is not None else None)
    return _from_annotation(type(value), ())


def _is_structured(cls: type) -> bool:
    return issubclass(cls, BaseModel) or dataclasses.is_dataclass(cls)


def _fields_of(source: Any) -> List[Tuple[str, Any, bool, Optional[str]]]:
    """Top-level ``(wire name, annotation, required, description)`` of a model or dataclass."""
    cls = source if isinstance(source, type) else type(source)
    if issubclass(cls, BaseModel):
        return [
            (info.alias or name, info.annotation, info.is_required(), info.description)
            for name, info in cls.model_fields.items()
        ]
    if dataclasses.is_dataclass(cls):
        hints = get_type_hints(cls, include_extras=True)
        result = []
        for f in dataclasses.fields(cls):
            required = f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
            result.append((f.name, hints.get(f.name, Any), required, f.metadata.get("description")))
        return result
    return []


def _shallow_kind(annotation: Any) -> Optional[SchemaKind]:
    origin = get_origin(annotation)
    if origin is Annotated:
        return _shallow_kind(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        members = [a for a in get_args(annotation) if a is not type(None)]
        return _shallow_kind(members[0]) if len(members) == 1 else None
    if origin is Literal:
        values = get_args(annotation)
        return _kind_of_value(values[0]) if values else None
    if origin in _SEQUENCE_ORIGINS or annotation in _SEQUENCE_ORIGINS:
        return SchemaKind.ARRAY
    if origin in _MAPPING_ORIGINS or annotation in _MAPPING_ORIGINS:
        return SchemaKind.OBJECT
    if not isinstance(annotation, type):
        return None
    if _is_structured(annotation):
        return SchemaKind.OBJECT
    try:
        return _from_annotation(annotation, ()).kind
    except SchemaConversionError:
        return None


def _kind_of_value(value: Any) -> Optional[SchemaKind]:
    if isinstance(value, bool):
        return SchemaKind.BOOLEAN
    if isinstance(value, int):
        return SchemaKind.INTEGER
    if isinstance(value, float):
        return SchemaKind.NUMBER
    if isinstance(value, str):
        return SchemaKind.STRING
    return None
