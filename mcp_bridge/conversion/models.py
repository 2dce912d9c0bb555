"""Materialize object descriptors as pydantic models.

The generated models use the title-cased field identifiers from the
descriptor and keep the original property names as aliases, so payloads are
validated and dumped with their source keys. Optional fields default to
``None``; `dump_model` only emits fields that were present in the validated
payload, mirroring "omit when empty" semantics of the wire format.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, create_model

from .descriptor import TypeDescriptor, TypeKind

NestedLookup = Callable[[TypeDescriptor], Optional[Type[BaseModel]]]

_MODEL_CONFIG = ConfigDict(populate_by_name=True, extra="ignore", protected_namespaces=())
_OPEN_MODEL_CONFIG = ConfigDict(populate_by_name=True, extra="allow", protected_namespaces=())

_PRIMITIVES: Dict[TypeKind, Any] = {
    TypeKind.STRING: str,
    TypeKind.INTEGER: int,
    TypeKind.NUMBER: float,
    TypeKind.BOOLEAN: bool,
    TypeKind.ANY: Any,
}


def annotation_for(descriptor: TypeDescriptor, nested: Optional[NestedLookup] = None) -> Any:
    """Return the Python annotation validating values of ``descriptor``."""
    kind = descriptor.kind
    if kind in _PRIMITIVES:
        return _PRIMITIVES[kind]
    if kind is TypeKind.TIMESTAMP:
        return date if descriptor.format == "date" else datetime
    if kind is TypeKind.ARRAY:
        return List[annotation_for(descriptor.element(), nested)]  # type: ignore[misc]
    if kind is TypeKind.OBJECT:
        if descriptor.open:
            return Dict[str, Any]
        model = nested(descriptor) if nested is not None else None
        return model if model is not None else materialize(descriptor, nested)
    raise ValueError(f"unsupported descriptor kind: {kind!r}")


def materialize(descriptor: TypeDescriptor, nested: Optional[NestedLookup] = None) -> Type[BaseModel]:
    """Create a pydantic model class for an object descriptor.

    Args:
        descriptor: Object descriptor to materialize.
        nested: Optional lookup returning an already-built model for a nested
            object descriptor; nested objects without one are materialized
            recursively.

    Returns:
        A new `BaseModel` subclass named after the descriptor.
    """
    if not descriptor.is_object:
        raise ValueError(f"only object descriptors can be materialized, got {descriptor.kind.value}")

    definitions: Dict[str, Any] = {}
    for f in descriptor.fields:
        annotation = annotation_for(f.type, nested)
        extra = {"enum": list(f.type.enum)} if f.type.enum else None
        if f.optional:
            info = Field(None, alias=f.source_name, description=f.type.description, json_schema_extra=extra)
            definitions[f.name] = (Optional[annotation], info)
        else:
            info = Field(..., alias=f.source_name, description=f.type.description, json_schema_extra=extra)
            definitions[f.name] = (annotation, info)

    config = _OPEN_MODEL_CONFIG if descriptor.open else _MODEL_CONFIG
    return create_model(descriptor.name or "Object", __config__=config, **definitions)


def dump_model(value: BaseModel) -> Dict[str, Any]:
    """Dump a validated model by source names, keeping only fields that were set."""
    return value.model_dump(mode="json", by_alias=True, exclude_unset=True)
