"""Conversion between schema nodes, type descriptors and Python values."""

from .coercion import coerce, to_mapping, zero_value
from .compiler import SchemaCompiler, as_schema_node, dump_payload
from .descriptor import (
    ANY,
    EMPTY_OBJECT,
    OPEN_OBJECT,
    FieldDescriptor,
    TypeDescriptor,
    TypeKind,
    array_of,
    field_name,
    object_of,
)
from .models import dump_model, materialize
from .serializer import inspect_input_shape, serialize, serialize_object
from .type_registry import RegisteredType, TypeRegistry

__all__ = [
    "ANY",
    "EMPTY_OBJECT",
    "OPEN_OBJECT",
    "FieldDescriptor",
    "RegisteredType",
    "SchemaCompiler",
    "TypeDescriptor",
    "TypeKind",
    "TypeRegistry",
    "array_of",
    "as_schema_node",
    "coerce",
    "dump_model",
    "dump_payload",
    "field_name",
    "inspect_input_shape",
    "materialize",
    "object_of",
    "serialize",
    "serialize_object",
    "to_mapping",
    "zero_value",
]
