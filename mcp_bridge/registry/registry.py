"""Shared tool registry.

The registry owns every `ToolEntry` exposed by the bridge. It is written
while groups are registered (possibly in the background, for remote
endpoints) and read concurrently by callers looking tools up; writes take the
exclusive side of a `ReadWriteLock`, reads the shared side.

Registration is append-only: an entry whose name is already registered is
dropped and the first registration stays in place.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Collection, Dict, Iterable, List, Optional

from mcp_bridge.conversion.coercion import to_mapping
from mcp_bridge.errors import InvocationTimeoutError, ToolExecutionError, UnknownToolError
from mcp_bridge.schemas.core import CallToolRequest, CallToolResult, ToolDescriptor, ToolEntry
from mcp_bridge.tool.matcher import match

from .builder import build_tool_entries
from .lock import ReadWriteLock
from .operations import OperationGroup


class ToolRegistry:
    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._entries: Dict[str, ToolEntry] = {}
        self._logger = logging.getLogger(__name__)

    def add_entries(self, entries: Iterable[ToolEntry]) -> int:
        """Register entries whose names are not taken yet.

        Returns:
            Number of entries actually added.
        """
        added = 0
        skipped: List[str] = []
        with self._lock.write():
            for entry in entries:
                if entry.name in self._entries:
                    skipped.append(entry.name)
                    continue
                self._entries[entry.name] = _snapshot(entry)
                added += 1
        if skipped:
            self._logger.debug("ToolRegistry.add_entries: skipped already registered tools=%s", skipped)
        return added

    def register_group(self, group: OperationGroup, complex_groups: Collection[str] = ()) -> int:
        return self.add_entries(build_tool_entries(group, complex_groups))

    def names(self) -> List[str]:
        with self._lock.read():
            return list(self._entries)

    def entries(self) -> List[ToolEntry]:
        with self._lock.read():
            return [_snapshot(e) for e in self._entries.values()]

    def descriptors(self) -> List[ToolDescriptor]:
        return [ToolDescriptor(name=e.name, description=e.description) for e in self.entries()]

    def get(self, name: str) -> Optional[ToolEntry]:
        with self._lock.read():
            entry = self._entries.get(name)
        return _snapshot(entry) if entry is not None else None

    def lookup(self, name: str) -> ToolEntry:
        entry = self.get(name)
        if entry is None:
            raise UnknownToolError(name)
        return entry

    def metadata(self, name: str) -> Dict[str, Any]:
        """Name, description and advertised schemas of a tool, as wire-shaped JSON."""
        entry = self.lookup(name)
        data: Dict[str, Any] = {
            "name": entry.name,
            "description": entry.description,
            "inputSchema": entry.input_schema.to_wire(),
        }
        if entry.output_schema is not None:
            data["outputSchema"] = entry.output_schema.to_wire()
        return data

    def match(self, pattern: str) -> List[ToolEntry]:
        """Entries whose name matches ``pattern``.

        Group paths may be given with ``/`` separators; a trailing ``/``
        selects every operation of that group.
        """
        normalized = pattern
        if normalized.endswith("/"):
            normalized = normalized[:-1].replace("/", "_") + "-"
        else:
            normalized = normalized.replace("/", "_")
        return [e for e in self.entries() if match(normalized, e.name)]

    async def execute(self, name: str, args: Any = None, *, timeout: Optional[float] = None) -> str:
        """Run a registered tool and return its text output.

        Raises:
            UnknownToolError: If no tool is registered under ``name``.
            ToolExecutionError: If the tool reports an error.
            InvocationTimeoutError: If the tool does not finish within ``timeout``.
        """
        entry = self.lookup(name)
        request = CallToolRequest(name=name, arguments=to_mapping(args))
        try:
            result = await asyncio.wait_for(entry.handler(request), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise InvocationTimeoutError(name, timeout or 0.0) from exc
        text = _result_text(result)
        if result.is_error:
            raise ToolExecutionError(name, text)
        return text

    def clear(self) -> None:
        with self._lock.write():
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, name: object) -> bool:
        with self._lock.read():
            return name in self._entries


def _snapshot(entry: ToolEntry) -> ToolEntry:
    """Copy of ``entry`` whose schemas share no state with the registry."""
    return entry.model_copy(
        update={
            "input_schema": entry.input_schema.model_copy(deep=True),
            "output_schema": entry.output_schema.model_copy(deep=True) if entry.output_schema is not None else None,
        }
    )


def _result_text(result: CallToolResult) -> str:
    for element in result.content:
        if element.text:
            return element.text
    return json.dumps([e.to_wire() for e in result.content])
