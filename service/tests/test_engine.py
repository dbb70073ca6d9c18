"""Tests for the tool engine wiring."""

import json

from app.agent.engine import ToolEngine
from app.agent.tools import ToolCall
from app.agent.tools.database_query import TOOL_NAME
from app.db.connection import Database


class TestToolEngine:
    def test_registers_database_query(self, engine: ToolEngine) -> None:
        tools = engine.get_available_tools()
        assert [t.name for t in tools] == [TOOL_NAME]
        assert engine.registry.get_tool(TOOL_NAME) is not None

    def test_execute_tool(self, engine: ToolEngine) -> None:
        result = engine.execute_tool(TOOL_NAME, {"query": "SELECT COUNT(*) AS n FROM contacts"})
        assert json.loads(result.content[0].text)["data"] == [{"n": 5}]

    def test_execute_tools(self, engine: ToolEngine) -> None:
        results = engine.execute_tools(
            [ToolCall(id="q1", name=TOOL_NAME, input={"query": "SELECT 1 as x"})]
        )
        assert len(results) == 1
        assert results[0].id == "q1"

    def test_parse_policy_passed_to_tool(self, database: Database) -> None:
        engine = ToolEngine(database, policy_mode="parse")
        result = engine.execute_tool(TOOL_NAME, {"query": "SELECT 1; SELECT 2"})
        assert result.is_error is True
        assert result.error.type == "validation_error"

    def test_engines_do_not_share_registries(self, database: Database) -> None:
        first, second = ToolEngine(database), ToolEngine(database)
        assert first.registry is not second.registry
