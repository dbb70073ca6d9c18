"""Tool engine: the registry wired to a database.

Created once in the application lifespan and shared by every router
through ``app.state.engine``.
"""

from __future__ import annotations

from typing import Any

from app.agent.registry import ToolRegistry
from app.agent.tools import ToolCall, ToolDefinition, ToolResult
from app.agent.tools.database_query import TOOL_NAME, DatabaseQueryTool
from app.db.connection import Database


class ToolEngine:
    def __init__(self, database: Database, *, policy_mode: str = "keyword") -> None:
        self.registry = ToolRegistry()
        self._register_tools(database, policy_mode)

    def _register_tools(self, database: Database, policy_mode: str) -> None:
        self.registry.register_tool(
            TOOL_NAME, DatabaseQueryTool(database, policy_mode=policy_mode)
        )

    def execute_tool(
        self,
        name: str,
        tool_input: dict[str, Any],
        *,
        call_id: str = "",
    ) -> ToolResult:
        return self.registry.execute_tool(name, tool_input, call_id=call_id)

    def execute_tools(self, tool_calls: list[ToolCall]) -> list[ToolResult]:
        return self.registry.execute_tools(tool_calls)

    def get_available_tools(self) -> list[ToolDefinition]:
        return self.registry.list_tools()
