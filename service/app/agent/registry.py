"""Tool registry.

Maps tool names to their executors and routes tool calls to them. The
registry is filled once at startup by the ToolEngine and only read after
that, so it carries no locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from app.agent.exceptions import ToolExecutionError, ToolNotFoundError, ToolValidationError
from app.agent.tools import ToolCall, ToolDefinition, ToolExecutor, ToolResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RegisteredTool:
    definition: ToolDefinition
    executor: ToolExecutor


class ToolRegistry:
    """Name → (definition, executor) mapping with validated dispatch.

    Usage:
        registry = ToolRegistry()
        registry.register_tool("database_query", DatabaseQueryTool(db))

        result = registry.execute_tool("database_query", {"query": "SELECT 1"})

    Registration overwrites any existing entry with the same name; there
    is no removal.
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def register_tool(self, name: str, executor: ToolExecutor) -> None:
        self._tools[name] = RegisteredTool(
            definition=executor.get_definition(),
            executor=executor,
        )
        logger.info("Registered tool: %s", name)

    def get_tool(self, name: str) -> RegisteredTool | None:
        return self._tools.get(name)

    def list_tools(self) -> list[ToolDefinition]:
        """Snapshot of all registered definitions. Order is not part of the contract."""
        return [entry.definition for entry in self._tools.values()]

    def execute_tool(
        self,
        name: str,
        tool_input: dict[str, Any],
        *,
        call_id: str = "",
    ) -> ToolResult:
        """Validate and run one tool.

        Args:
            name: Registered tool name
            tool_input: Tool arguments
            call_id: Identifier copied onto the result

        Returns:
            The executor's result, or a ``validation_error`` /
            ``execution_error`` result.

        Raises:
            ToolNotFoundError: If ``name`` is not registered
        """
        entry = self.get_tool(name)
        if entry is None:
            raise ToolNotFoundError(name)

        try:
            entry.executor.validate(tool_input)
        except ToolValidationError as e:
            logger.info("Tool %s rejected input: %s", name, e)
            result = ToolResult.failure(
                "validation_error", str(e), f"Validation error: {e}"
            )
        else:
            try:
                result = entry.executor.execute(tool_input)
            except ToolExecutionError as e:
                logger.exception("Tool %s failed", name)
                result = ToolResult.failure(
                    "execution_error", str(e), f"Execution error: {e}"
                )

        result.id = call_id
        return result

    def execute_tools(self, tool_calls: list[ToolCall]) -> list[ToolResult]:
        """Execute each call independently, preserving input order.

        An unknown tool name fails only its own call, as an
        ``execution_error`` result.
        """
        results: list[ToolResult] = []
        for call in tool_calls:
            try:
                result = self.execute_tool(call.name, call.input, call_id=call.id)
            except ToolNotFoundError as e:
                result = ToolResult.failure(
                    "execution_error", str(e), f"Execution error: {e}"
                )
                result.id = call.id
            results.append(result)
        return results
