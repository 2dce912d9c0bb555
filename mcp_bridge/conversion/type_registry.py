"""Registry of synthesized object types.

Every object descriptor produced by the schema compiler is registered here
together with the pydantic model materialized for it, so later lookups (for
example re-serializing a decoded value) do not need to recompile anything.

The registry is owned by a `SchemaCompiler` and lives as long as the bridge
that created it; `clear()` releases everything on shutdown.

Structurally identical types are not merged by default: each compilation
registers its own entry. Pass ``deduplicate=True`` to reuse the first
registered entry of a matching structure instead, which bounds growth when
many remote tools share shapes or tools are rediscovered repeatedly.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Type

from pydantic import BaseModel

from .descriptor import TypeDescriptor
from .models import materialize

_INVALID_NAME = re.compile(r"\W")


@dataclass(frozen=True)
class RegisteredType:
    name: str
    descriptor: TypeDescriptor
    model: Type[BaseModel]


class TypeRegistry:
    def __init__(self, *, deduplicate: bool = False) -> None:
        self._deduplicate = deduplicate
        self._lock = threading.Lock()
        self._by_name: Dict[str, RegisteredType] = {}
        self._order: List[RegisteredType] = []
        self._logger = logging.getLogger(__name__)

    @property
    def deduplicate(self) -> bool:
        return self._deduplicate

    def register(self, descriptor: TypeDescriptor, name: Optional[str] = None) -> RegisteredType:
        """Register an object descriptor and materialize its model.

        Args:
            descriptor: An object `TypeDescriptor`.
            name: Preferred type name; made unique with a numeric suffix when
                already taken. Defaults to the descriptor's own name.

        Returns:
            The `RegisteredType` holding the (possibly renamed) descriptor and
            its pydantic model. With deduplication enabled, a previously
            registered structurally equal entry is returned instead.

        Raises:
            ValueError: If ``descriptor`` is not an object descriptor.
        """
        if not descriptor.is_object:
            raise ValueError(f"only object descriptors can be registered, got {descriptor.kind.value}")
        with self._lock:
            if self._deduplicate:
                for existing in self._order:
                    if existing.descriptor == descriptor:
                        return existing
            unique = self._unique_name(name or descriptor.name or "Object")
            named = descriptor.with_name(unique)
            entry = RegisteredType(name=unique, descriptor=named, model=materialize(named, self._model_for_nested))
            self._by_name[unique] = entry
            self._order.append(entry)
        self._logger.debug("TypeRegistry.register: name=%s fields=%d", unique, len(named.fields))
        return entry

    def _model_for_nested(self, descriptor: TypeDescriptor) -> Optional[Type[BaseModel]]:
        # called with the lock held while materializing a parent type
        if descriptor.name is None:
            return None
        entry = self._by_name.get(descriptor.name)
        if entry is not None and entry.descriptor == descriptor:
            return entry.model
        return None

    def _unique_name(self, name: str) -> str:
        base = _INVALID_NAME.sub("_", name) or "Object"
        if base[0].isdigit():
            base = "T_" + base
        candidate, n = base, 2
        while candidate in self._by_name:
            candidate = f"{base}_{n}"
            n += 1
        return candidate

    def lookup(self, name: str) -> Optional[RegisteredType]:
        with self._lock:
            return self._by_name.get(name)

    def find(self, descriptor: TypeDescriptor) -> Optional[RegisteredType]:
        """Return the registered entry for ``descriptor``.

        Prefers the entry registered under the descriptor's own name, falling
        back to the first structurally equal entry.
        """
        with self._lock:
            if descriptor.name is not None:
                entry = self._by_name.get(descriptor.name)
                if entry is not None and entry.descriptor == descriptor:
                    return entry
            for entry in self._order:
                if entry.descriptor == descriptor:
                    return entry
        return None

    def types(self) -> List[RegisteredType]:
        with self._lock:
            return list(self._order)

    def clear(self) -> None:
        with self._lock:
            count = len(self._order)
            self._by_name.clear()
            self._order.clear()
        self._logger.debug("TypeRegistry.clear: released=%d", count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._order)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._by_name
