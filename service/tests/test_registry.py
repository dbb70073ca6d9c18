"""Tests for the tool registry: registration, dispatch, error conversion."""

import json
from typing import Any

import pytest

from app.agent.exceptions import ToolExecutionError, ToolNotFoundError, ToolValidationError
from app.agent.registry import ToolRegistry
from app.agent.tools import ToolCall, ToolDefinition, ToolExecutor, ToolResult
from app.agent.tools.database_query import TOOL_NAME, DatabaseQueryTool
from app.db.connection import Database


class EchoTool(ToolExecutor):
    """Returns its ``text`` input; rejects anything else."""

    def __init__(self, name: str = "echo") -> None:
        self.name = name
        self.executed: list[dict[str, Any]] = []

    def get_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description="Echo text back",
            input_schema={"type": "object", "properties": {"text": {"type": "string"}}},
        )

    def validate(self, tool_input: dict[str, Any]) -> None:
        if not isinstance(tool_input.get("text"), str):
            raise ToolValidationError("text is required")

    def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        self.executed.append(tool_input)
        if tool_input["text"] == "boom":
            raise ToolExecutionError("connection reset")
        return ToolResult.from_text(tool_input["text"])


@pytest.fixture
def registry(database: Database) -> ToolRegistry:
    registry = ToolRegistry()
    registry.register_tool(TOOL_NAME, DatabaseQueryTool(database))
    return registry


class TestRegistration:
    def test_get_tool(self) -> None:
        registry = ToolRegistry()
        tool = EchoTool()
        registry.register_tool("echo", tool)

        entry = registry.get_tool("echo")
        assert entry is not None
        assert entry.executor is tool
        assert entry.definition.name == "echo"

    def test_get_unknown_tool(self) -> None:
        assert ToolRegistry().get_tool("nope") is None

    def test_register_overwrites(self) -> None:
        registry = ToolRegistry()
        first, second = EchoTool(), EchoTool()
        registry.register_tool("echo", first)
        registry.register_tool("echo", second)

        assert registry.get_tool("echo").executor is second
        assert len(registry.list_tools()) == 1

    def test_list_tools(self) -> None:
        registry = ToolRegistry()
        registry.register_tool("a", EchoTool("a"))
        registry.register_tool("b", EchoTool("b"))

        assert {d.name for d in registry.list_tools()} == {"a", "b"}


class TestExecuteTool:
    def test_unknown_tool_raises(self, registry: ToolRegistry) -> None:
        with pytest.raises(ToolNotFoundError, match="tool 'nonexistent' not found"):
            registry.execute_tool("nonexistent", {})

    def test_missing_query_is_validation_error(self, registry: ToolRegistry) -> None:
        result = registry.execute_tool(TOOL_NAME, {})
        assert result.is_error is True
        assert result.error.type == "validation_error"
        assert result.content[0].text == "Validation error: query must be a string"

    def test_forbidden_query_never_executed(self) -> None:
        registry = ToolRegistry()
        tool = EchoTool()
        registry.register_tool("echo", tool)

        result = registry.execute_tool("echo", {"text": 1})

        assert result.error.type == "validation_error"
        assert tool.executed == []

    def test_execution_failure_is_execution_error(self) -> None:
        registry = ToolRegistry()
        registry.register_tool("echo", EchoTool())

        result = registry.execute_tool("echo", {"text": "boom"})

        assert result.is_error is True
        assert result.error.type == "execution_error"
        assert result.error.message == "connection reset"
        assert result.content[0].text == "Execution error: connection reset"

    def test_call_id_copied_to_result(self, registry: ToolRegistry) -> None:
        result = registry.execute_tool(TOOL_NAME, {"query": "SELECT 1 as x"}, call_id="toolu_1")
        assert result.id == "toolu_1"
        assert result.is_error is False

    def test_call_id_copied_to_error_result(self, registry: ToolRegistry) -> None:
        result = registry.execute_tool(TOOL_NAME, {"query": "DROP TABLE contacts"}, call_id="c9")
        assert result.id == "c9"
        assert result.is_error is True


class TestExecuteTools:
    def test_results_follow_call_order(self, registry: ToolRegistry) -> None:
        calls = [
            ToolCall(id="a", name=TOOL_NAME, input={"query": "SELECT 1 as x"}),
            ToolCall(id="b", name=TOOL_NAME, input={"query": "SELECT 2 as y"}),
        ]

        results = registry.execute_tools(calls)

        assert [r.id for r in results] == ["a", "b"]
        assert json.loads(results[0].content[0].text)["data"] == [{"x": 1}]
        assert json.loads(results[1].content[0].text)["data"] == [{"y": 2}]

    def test_failures_are_independent(self, registry: ToolRegistry) -> None:
        calls = [
            ToolCall(id="1", name="missing_tool", input={}),
            ToolCall(id="2", name=TOOL_NAME, input={"query": "UPDATE contacts SET name = 'x'"}),
            ToolCall(id="3", name=TOOL_NAME, input={"query": "SELECT 3 as z"}),
        ]

        results = registry.execute_tools(calls)

        assert [r.id for r in results] == ["1", "2", "3"]
        assert results[0].error.type == "execution_error"
        assert "not found" in results[0].error.message
        assert results[1].error.type == "validation_error"
        assert results[2].is_error is False

    def test_empty_batch(self, registry: ToolRegistry) -> None:
        assert registry.execute_tools([]) == []
