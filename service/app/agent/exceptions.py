"""Exceptions raised by the tool registry and its executors.

Validation and execution failures are normally converted into error
ToolResults by the registry; only ToolNotFoundError reaches the caller
of ``execute_tool``.
"""


class AgentToolError(Exception):
    """Base exception for all tool-related errors."""


class ToolNotFoundError(AgentToolError):
    """Raised when a requested tool is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"tool '{name}' not found")
        self.name = name


class ToolValidationError(AgentToolError):
    """Raised by an executor when its input must not be executed."""

    code = "invalid_input"


class ToolExecutionError(AgentToolError):
    """Raised by an executor on a transport-level failure.

    Executors report ordinary failures (a bad query, a missing table) as
    error ToolResults; this exception is reserved for failures that leave
    the executor unable to produce a result at all.
    """
