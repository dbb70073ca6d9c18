"""Tool contracts shared by the registry, executors, and HTTP routers.

Every shape here is also a wire format: tool definitions are sent to the
LLM vendor, tool calls arrive from it (or from direct API callers), and
tool results are returned verbatim as HTTP bodies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolDefinition(BaseModel):
    """Name, description and JSON-schema input contract of a tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: dict[str, Any]


class ToolCall(BaseModel):
    """One request to invoke a tool with specific input."""

    id: str = ""
    type: str = "tool_use"
    name: str = ""
    input: dict[str, Any] = Field(default_factory=dict)


class ToolContent(BaseModel):
    type: str = "text"
    text: str | None = None
    data: Any = None


class ToolError(BaseModel):
    type: str
    message: str


class ToolResult(BaseModel):
    """Structured outcome of one tool call, well-formed even on failure.

    Callers branch on ``is_error``; ``error.type`` distinguishes input
    problems (``validation_error``) from database failures
    (``query_error``) and dispatch failures (``execution_error``).
    """

    id: str = ""
    content: list[ToolContent] = Field(default_factory=list)
    is_error: bool = False
    error: ToolError | None = None

    @classmethod
    def from_text(cls, text: str) -> ToolResult:
        return cls(content=[ToolContent(type="text", text=text)])

    @classmethod
    def failure(cls, error_type: str, message: str, text: str) -> ToolResult:
        return cls(
            content=[ToolContent(type="text", text=text)],
            is_error=True,
            error=ToolError(type=error_type, message=message),
        )


class ToolExecutor(ABC):
    """Interface every registered tool implements."""

    @abstractmethod
    def get_definition(self) -> ToolDefinition:
        """Return the definition advertised to callers."""

    @abstractmethod
    def validate(self, tool_input: dict[str, Any]) -> None:
        """Raise ToolValidationError if ``tool_input`` must not be executed."""

    @abstractmethod
    def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        """Run the tool. Only called after ``validate`` succeeded."""
