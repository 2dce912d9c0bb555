from __future__ import annotations

import json
from typing import List, Optional

import pytest
from pydantic import BaseModel

from mcp_bridge.conversion import object_of
from mcp_bridge.errors import UnknownOperationError
from mcp_bridge.registry import LocalOperationGroup, OperationSignature, build_tool_entries, result_text
from mcp_bridge.schemas import CallToolRequest, SchemaKind


class ReadRequest(BaseModel):
    path: str
    limit: Optional[int] = None


class ReadResponse(BaseModel):
    content: str
    size: int


class TreeNode(BaseModel):
    name: str
    children: List["TreeNode"] = []


def _files_group() -> LocalOperationGroup:
    group = LocalOperationGroup("system/files")

    @group.operation(description="Read a file")
    async def read(req: ReadRequest) -> ReadResponse:
        if req.path == "missing":
            raise FileNotFoundError("no such file: missing")
        return ReadResponse(content="data", size=4)

    @group.operation
    def ping() -> str:
        """Health check."""
        return "pong"

    return group


class TestLocalOperationGroup:
    """Signatures inferred from annotations."""

    def test_signatures(self) -> None:
        group = _files_group()
        signatures = {s.name: s for s in group.methods()}
        assert signatures["read"] == OperationSignature(
            name="read", description="Read a file", input=ReadRequest, output=ReadResponse
        )
        assert signatures["ping"].input is None
        assert signatures["ping"].output is str
        assert signatures["ping"].description == "Health check."

    def test_unknown_method(self) -> None:
        with pytest.raises(UnknownOperationError):
            _files_group().method("write")

    @pytest.mark.asyncio
    async def test_sync_callable_awaited(self) -> None:
        assert await _files_group().method("ping")() == "pong"


class TestBuildToolEntries:
    """Tool entries built from operation groups."""

    def test_names_and_schemas(self) -> None:
        entries = {e.name: e for e in build_tool_entries(_files_group())}
        assert set(entries) == {"system_files-read", "system_files-ping"}

        read = entries["system_files-read"]
        assert read.description == "Read a file"
        assert set((read.input_schema.properties or {}).keys()) == {"path", "limit"}
        assert read.input_schema.required == ["path"]
        assert read.output_schema is not None
        assert set((read.output_schema.properties or {}).keys()) == {"content", "size"}

        ping = entries["system_files-ping"]
        assert ping.input_schema.to_wire() == {"type": "object", "properties": {}}
        assert ping.output_schema is not None and ping.output_schema.kind is SchemaKind.STRING

    def test_recursive_types_fall_back_to_shallow_schema(self) -> None:
        group = LocalOperationGroup("tree")
        group.add("walk", lambda node: node.name, input_type=TreeNode, output_type=str)
        (entry,) = build_tool_entries(group)
        assert entry.output_schema is None
        children = (entry.input_schema.properties or {})["children"]
        assert children.kind is SchemaKind.ARRAY and children.items is None

    def test_complex_group_skips_full_serialization(self) -> None:
        group = _files_group()
        (read,) = [e for e in build_tool_entries(group, complex_groups=["system/files"]) if e.name.endswith("-read")]
        assert read.output_schema is None
        assert read.input_schema.required == ["path"]

    def test_flagged_group(self) -> None:
        group = LocalOperationGroup("mcpClient", complex_schema=True)
        group.add("call", lambda req: "ok", input_type=ReadRequest, output_type=str)
        (entry,) = build_tool_entries(group)
        assert entry.output_schema is None

    def test_descriptor_typed_input(self) -> None:
        group = LocalOperationGroup("remote")
        group.add("echo", lambda args: args, input_type=object_of([]), output_type=None)
        (entry,) = build_tool_entries(group)
        assert entry.input_schema.to_wire() == {"type": "object", "properties": {}}


class TestToolHandlers:
    """Execution through tool entry handlers."""

    @pytest.mark.asyncio
    async def test_success_returns_json_text(self) -> None:
        entries = {e.name: e for e in build_tool_entries(_files_group())}
        result = await entries["system_files-read"].handler(
            CallToolRequest(name="system_files-read", arguments={"path": "a.txt"})
        )
        assert not result.is_error
        assert json.loads(result.content[0].text or "") == {"content": "data", "size": 4}

    @pytest.mark.asyncio
    async def test_operation_failure_becomes_error_result(self) -> None:
        entries = {e.name: e for e in build_tool_entries(_files_group())}
        result = await entries["system_files-read"].handler(
            CallToolRequest(name="system_files-read", arguments={"path": "missing"})
        )
        assert result.is_error
        assert result.content[0].text == "no such file: missing"

    @pytest.mark.asyncio
    async def test_invalid_arguments_become_error_result(self) -> None:
        entries = {e.name: e for e in build_tool_entries(_files_group())}
        result = await entries["system_files-read"].handler(
            CallToolRequest(name="system_files-read", arguments={"limit": "x"})
        )
        assert result.is_error

    @pytest.mark.asyncio
    async def test_no_input_operation(self) -> None:
        entries = {e.name: e for e in build_tool_entries(_files_group())}
        result = await entries["system_files-ping"].handler(CallToolRequest(name="system_files-ping"))
        assert result.content[0].text == "pong"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        ("plain", "plain"),
        (b"bytes", "bytes"),
        ({"a": 1}, '{"a": 1}'),
        ([1, 2], "[1, 2]"),
    ],
)
def test_result_text(value: object, expected: str) -> None:
    assert result_text(value) == expected
