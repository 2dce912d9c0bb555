"""Pydantic base schema utilities for bridge models.

Provides `BaseSchema` (strict, used for configuration) and `WireSchema`
(lenient, used for payloads received from remote MCP endpoints). Both accept
either snake_case names or their camelCase aliases and dump camelCase.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


def _to_camel(s: str) -> str:
    """Convert snake_case to camelCase for JSON aliasing."""
    parts = s.split("_")
    return parts[0] + "".join(p.capitalize() or "_" for p in parts[1:])


class BaseSchema(BaseModel):
    """Shared base for locally-authored models.

    - Rejects unknown fields
    - Enables populate_by_name for using either snake_case or camelCase
    - Uses a snake->camel alias generator for JSON interop
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        alias_generator=_to_camel,
    )


class WireSchema(BaseModel):
    """Shared base for models parsed from remote payloads.

    Remote producers add fields over time (``annotations``, ``_meta``...), so
    unknown keys are ignored instead of rejected.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        alias_generator=_to_camel,
    )
