from __future__ import annotations

import asyncio
import threading
from typing import Any, List

import pytest
from pydantic import BaseModel

from mcp_bridge.errors import InvocationTimeoutError, ToolExecutionError, UnknownToolError
from mcp_bridge.registry import LocalOperationGroup, ReadWriteLock, ToolRegistry
from mcp_bridge.schemas import CallToolRequest, CallToolResult, SchemaNode, ToolEntry


class EchoRequest(BaseModel):
    text: str


def _entry(name: str, text: str, *, is_error: bool = False) -> ToolEntry:
    async def handler(request: CallToolRequest) -> CallToolResult:
        return CallToolResult.text_result(text, is_error=is_error)

    return ToolEntry(
        name=name,
        description=f"returns {text}",
        input_schema=SchemaNode.model_validate({"type": "object", "properties": {}}),
        handler=handler,
    )


def _echo_group(name: str = "util") -> LocalOperationGroup:
    group = LocalOperationGroup(name)

    @group.operation(description="Echo text")
    async def echo(req: EchoRequest) -> str:
        return req.text

    @group.operation(description="Always fails")
    async def fail(req: EchoRequest) -> str:
        raise RuntimeError(f"cannot handle {req.text}")

    @group.operation(description="Sleeps")
    async def slow(req: EchoRequest) -> str:
        await asyncio.sleep(1)
        return req.text

    return group


class TestRegistration:
    """Append-only registration keyed by canonical name."""

    def test_first_registration_wins(self) -> None:
        registry = ToolRegistry()
        first = _entry("a-run", "first")
        second = _entry("a-run", "second")

        assert registry.add_entries([first]) == 1
        assert registry.add_entries([second]) == 0

        assert len(registry) == 1
        kept = registry.lookup("a-run")
        assert kept == first
        assert kept.handler is first.handler
        assert kept.description == "returns first"

    def test_duplicates_within_one_batch(self) -> None:
        registry = ToolRegistry()
        assert registry.add_entries([_entry("a-run", "1"), _entry("a-run", "2"), _entry("b-run", "3")]) == 2
        assert registry.names() == ["a-run", "b-run"]

    def test_register_group(self) -> None:
        registry = ToolRegistry()
        assert registry.register_group(_echo_group()) == 3
        assert registry.register_group(_echo_group()) == 0
        assert "util-echo" in registry

    def test_concurrent_registration(self) -> None:
        registry = ToolRegistry()
        added: List[int] = []

        def worker() -> None:
            added.append(registry.add_entries([_entry("shared-run", "x")]))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(added) == 1
        assert len(registry) == 1


class TestQueries:
    """Lookups, metadata and pattern matching."""

    def test_lookup_unknown(self) -> None:
        with pytest.raises(UnknownToolError) as exc_info:
            ToolRegistry().lookup("nope-run")
        assert exc_info.value.tool_name == "nope-run"

    def test_get_unknown_is_none(self) -> None:
        assert ToolRegistry().get("nope-run") is None

    def test_descriptors(self) -> None:
        registry = ToolRegistry()
        registry.register_group(_echo_group())
        descriptors = {d.name: d.description for d in registry.descriptors()}
        assert descriptors["util-echo"] == "Echo text"

    def test_metadata(self) -> None:
        registry = ToolRegistry()
        registry.register_group(_echo_group())
        meta = registry.metadata("util-echo")
        assert meta["name"] == "util-echo"
        assert meta["inputSchema"] == {
            "type": "object",
            "properties": {"text": {"type": "string"}},
            "required": ["text"],
        }
        assert meta["outputSchema"] == {"type": "string"}

    def test_match(self) -> None:
        registry = ToolRegistry()
        registry.register_group(_echo_group("system/util"))
        registry.register_group(_echo_group("system"))

        assert {e.name for e in registry.match("system/util/")} == {
            "system_util-echo",
            "system_util-fail",
            "system_util-slow",
        }
        assert {e.name for e in registry.match("system/")} == {"system-echo", "system-fail", "system-slow"}
        assert {e.name for e in registry.match("system_")} == {
            "system_util-echo",
            "system_util-fail",
            "system_util-slow",
        }
        assert [e.name for e in registry.match("system-echo")] == ["system-echo"]
        assert len(registry.match("*")) == 6

    def test_readers_cannot_alter_registered_schemas(self) -> None:
        registry = ToolRegistry()
        registry.register_group(_echo_group())
        before = registry.metadata("util-echo")

        looked_up = registry.get("util-echo")
        assert looked_up is not None
        looked_up.input_schema.description = "mutated"
        looked_up.input_schema.properties["evil"] = SchemaNode.model_validate({"type": "string"})
        registry.lookup("util-echo").output_schema.description = "mutated"
        registry.entries()[0].input_schema.required.append("evil")

        assert registry.metadata("util-echo") == before

    def test_registered_entry_detached_from_caller(self) -> None:
        registry = ToolRegistry()
        entry = _entry("a-run", "first")
        registry.add_entries([entry])

        entry.input_schema.description = "mutated"

        assert "description" not in registry.metadata("a-run")["inputSchema"]

    def test_clear(self) -> None:
        registry = ToolRegistry()
        registry.register_group(_echo_group())
        registry.clear()
        assert len(registry) == 0


class TestExecute:
    """Executing registered tools."""

    @pytest.mark.asyncio
    async def test_execute(self) -> None:
        registry = ToolRegistry()
        registry.register_group(_echo_group())
        assert await registry.execute("util-echo", {"text": "hi"}) == "hi"

    @pytest.mark.asyncio
    async def test_execute_with_model_args(self) -> None:
        registry = ToolRegistry()
        registry.register_group(_echo_group())
        assert await registry.execute("util-echo", EchoRequest(text="hey")) == "hey"

    @pytest.mark.asyncio
    async def test_error_result_raises(self) -> None:
        registry = ToolRegistry()
        registry.register_group(_echo_group())
        with pytest.raises(ToolExecutionError) as exc_info:
            await registry.execute("util-fail", {"text": "x"})
        assert exc_info.value.message == "cannot handle x"
        assert exc_info.value.tool_name == "util-fail"

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        registry = ToolRegistry()
        registry.register_group(_echo_group())
        with pytest.raises(InvocationTimeoutError):
            await registry.execute("util-slow", {"text": "x"}, timeout=0.01)

    @pytest.mark.asyncio
    async def test_unknown_tool(self) -> None:
        with pytest.raises(UnknownToolError):
            await ToolRegistry().execute("missing-run")

    @pytest.mark.asyncio
    async def test_concurrent_executions(self) -> None:
        registry = ToolRegistry()
        registry.register_group(_echo_group())
        results = await asyncio.gather(*(registry.execute("util-echo", {"text": str(i)}) for i in range(5)))
        assert results == ["0", "1", "2", "3", "4"]


class TestReadWriteLock:
    def test_readers_share(self) -> None:
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=2)
        errors: List[Any] = []

        def reader() -> None:
            with lock.read():
                try:
                    inside.wait()
                except threading.BrokenBarrierError as exc:
                    errors.append(exc)

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []

    def test_writer_excludes_readers(self) -> None:
        lock = ReadWriteLock()
        events: List[str] = []
        writer_in = threading.Event()
        release = threading.Event()

        def writer() -> None:
            with lock.write():
                events.append("write-start")
                writer_in.set()
                release.wait(2)
                events.append("write-end")

        def reader() -> None:
            with lock.read():
                events.append("read")

        w = threading.Thread(target=writer)
        w.start()
        writer_in.wait(2)
        r = threading.Thread(target=reader)
        r.start()
        release.set()
        w.join()
        r.join()
        assert events == ["write-start", "write-end", "read"]
