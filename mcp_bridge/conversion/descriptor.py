"""Structural type descriptors.

A `TypeDescriptor` is the internal, explicitly tagged representation of a
value shape compiled from a `SchemaNode`. The tag is `TypeKind`; object
descriptors carry `FieldDescriptor`s, array descriptors carry an element
descriptor. Descriptors are immutable and compare structurally: two
compilations of the same schema are equal even though each got its own
synthesized ``name``.
"""

from __future__ import annotations

import keyword
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel


class TypeKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    ANY = "any"
    OBJECT = "object"
    ARRAY = "array"


PRIMITIVE_KINDS = frozenset(
    {TypeKind.STRING, TypeKind.INTEGER, TypeKind.NUMBER, TypeKind.BOOLEAN, TypeKind.TIMESTAMP, TypeKind.ANY}
)

_INVALID_IDENT = re.compile(r"\W")


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    source_name: str
    type: TypeDescriptor
    optional: bool = False


@dataclass(frozen=True)
class TypeDescriptor:
    kind: TypeKind
    format: Optional[str] = None
    fields: Tuple[FieldDescriptor, ...] = ()
    items: Optional[TypeDescriptor] = None
    description: Optional[str] = None
    enum: Tuple[Any, ...] = ()
    # open objects accept any mapping; used as the permissive fallback input type
    open: bool = False
    name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.fields and self.kind is not TypeKind.OBJECT:
            raise ValueError(f"fields are only allowed on object descriptors, got {self.kind.value}")
        if self.items is not None and self.kind is not TypeKind.ARRAY:
            raise ValueError(f"items are only allowed on array descriptors, got {self.kind.value}")
        if self.open and self.kind is not TypeKind.OBJECT:
            raise ValueError("only object descriptors can be open")
        names = [f.source_name for f in self.fields]
        if names != sorted(names):
            raise ValueError("object fields must be ordered by source name")

    @property
    def is_object(self) -> bool:
        return self.kind is TypeKind.OBJECT

    @property
    def is_array(self) -> bool:
        return self.kind is TypeKind.ARRAY

    def get_field(self, source_name: str) -> Optional[FieldDescriptor]:
        for f in self.fields:
            if f.source_name == source_name:
                return f
        return None

    def element(self) -> TypeDescriptor:
        """Element type of an array; arrays without items hold any value."""
        return self.items if self.items is not None else ANY

    def with_name(self, name: str) -> TypeDescriptor:
        return TypeDescriptor(
            kind=self.kind,
            format=self.format,
            fields=self.fields,
            items=self.items,
            description=self.description,
            enum=self.enum,
            open=self.open,
            name=name,
        )


ANY = TypeDescriptor(TypeKind.ANY)
EMPTY_OBJECT = TypeDescriptor(TypeKind.OBJECT)
OPEN_OBJECT = TypeDescriptor(TypeKind.OBJECT, open=True)


def object_of(fields: Tuple[FieldDescriptor, ...] | list[FieldDescriptor], **kwargs: Any) -> TypeDescriptor:
    ordered = tuple(sorted(fields, key=lambda f: f.source_name))
    return TypeDescriptor(TypeKind.OBJECT, fields=ordered, **kwargs)


def array_of(items: Optional[TypeDescriptor], **kwargs: Any) -> TypeDescriptor:
    return TypeDescriptor(TypeKind.ARRAY, items=items, **kwargs)


def field_name(source_name: str, taken: Optional[set[str]] = None) -> str:
    """Return the title-cased Python identifier used for a source property.

    ``user_id`` -> ``User_id``, ``first-name`` -> ``First_name``, ``2fa`` ->
    ``F_2fa``, ``config`` -> ``Config_`` (names pydantic reserves get a
    trailing underscore). When ``taken`` is given the result is made unique
    against it and added to it.
    """
    ident = _INVALID_IDENT.sub("_", source_name)
    if not ident or ident[0].isdigit() or ident[0] == "_":
        ident = "F_" + ident
    ident = ident[0].upper() + ident[1:]
    if keyword.iskeyword(ident) or ident == "Config" or hasattr(BaseModel, ident):
        ident += "_"
    if taken is not None:
        base, n = ident, 2
        while ident in taken:
            ident = f"{base}_{n}"
            n += 1
        taken.add(ident)
    return ident
