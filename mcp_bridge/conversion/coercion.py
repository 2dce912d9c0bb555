"""Generic value coercion.

`coerce` converts an untyped value (typically a decoded JSON mapping) into a
typed destination. Values that already are instances of the destination are
passed through; everything else goes through a JSON-compatible dump followed
by validation with a pydantic `TypeAdapter`.
"""

from __future__ import annotations

import logging
import typing
from functools import lru_cache
from typing import Any, Dict, TypeVar, get_origin

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from mcp_bridge.errors import CoercionError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _is_valid_target(target: Any) -> bool:
    return target is Any or isinstance(target, type) or get_origin(target) is not None


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def zero_value(target: Any) -> Any:
    """Return the empty value of ``target``.

    Containers are empty, numbers are zero, strings are empty; models and
    optional/any targets have no zero value other than ``None``.
    """
    origin = get_origin(target) or target
    if origin in (dict, list, set, tuple, frozenset):
        return origin()
    if origin is typing.Union:
        return None
    if isinstance(origin, type):
        if issubclass(origin, bool):
            return False
        if issubclass(origin, (int, float, str, bytes)) and not issubclass(origin, BaseModel):
            try:
                return origin()
            except TypeError:
                return None
    return None


def dump_value(value: Any) -> Any:
    """JSON-compatible representation of ``value`` using wire (alias) names."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return to_jsonable_python(value, by_alias=True)


def coerce(value: Any, target: Any) -> Any:
    """Convert ``value`` into an instance of ``target``.

    Args:
        value: Source value; ``None`` yields the target's zero value.
        target: A class, a generic alias such as ``Dict[str, Any]`` or
            ``List[Model]``, or ``Any``.

    Raises:
        CoercionError: If ``target`` is not a valid destination or the value
            cannot be converted into it.
    """
    if target is None or not _is_valid_target(target):
        raise CoercionError(target, "invalid destination type")
    if value is None:
        return zero_value(target)
    if target is Any:
        return value
    if isinstance(target, type) and get_origin(target) is None and isinstance(value, target):
        return value

    try:
        dumped = dump_value(value)
    except PydanticSerializationError as exc:
        raise CoercionError(target, f"cannot serialize {type(value).__name__}: {exc}") from exc
    try:
        return _adapter(target).validate_python(dumped)
    except ValidationError as exc:
        logger.debug("coerce: target=%r errors=%d", target, exc.error_count())
        raise CoercionError(target, str(exc)) from exc


def to_mapping(value: Any) -> Dict[str, Any]:
    """Coerce ``value`` into a plain argument mapping."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    result = coerce(value, Dict[str, Any])
    return dict(to_jsonable_python(result, by_alias=True))
