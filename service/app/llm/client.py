"""LLM client: natural-language message → structured tool calls.

Sends the user's message to the configured chat model together with a
system prompt describing the database and the tool definitions taken from
the live registry, then parses the reply into plain text and/or
``database_query`` tool calls. Executing those calls is the router's job.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from app.agent.engine import ToolEngine
from app.agent.tools import ToolCall
from app.db.connection import Database
from app.db.schema import describe_schema
from app.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = """\
You are a database query assistant for a {database_type} database. \
You have access to the following database schema:

{schema}

You MUST use the database_query tool to execute SQL queries based on user \
requests. Never respond with text - only execute tools."""


class LLMError(Exception):
    """Base exception for LLM client failures."""


class LLMConfigurationError(LLMError):
    """Raised when the provider has no credential."""


class LLMTransportError(LLMError):
    """Raised when the vendor call does not succeed."""


class LLMResponseParseError(LLMError):
    """Raised when the vendor response is not well-formed."""


@dataclass(slots=True)
class LLMResponse:
    """Parsed model reply: free text, tool calls, or both."""

    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    stop_reason: str | None = None


def _extract_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    raise LLMResponseParseError(
        f"Unexpected message content type: {type(content).__name__}"
    )


def parse_response(message: BaseMessage) -> LLMResponse:
    """Split a model reply into text and ToolCalls.

    Raises:
        LLMResponseParseError: If the reply is not an AI message or carries
            tool calls whose arguments could not be decoded.
    """
    if not isinstance(message, AIMessage):
        raise LLMResponseParseError(
            f"Expected an AI message, got {type(message).__name__}"
        )

    if message.invalid_tool_calls:
        bad = message.invalid_tool_calls[0]
        raise LLMResponseParseError(
            f"Malformed tool call {bad.get('name')!r}: {bad.get('error')}"
        )

    tool_calls = []
    for call in message.tool_calls:
        args = call.get("args")
        if not isinstance(args, dict):
            raise LLMResponseParseError(
                f"Tool call {call.get('name')!r} has non-object input"
            )
        tool_calls.append(
            ToolCall(
                id=call.get("id") or "",
                type="tool_use",
                name=call["name"],
                input=args,
            )
        )

    metadata = message.response_metadata or {}
    return LLMResponse(
        text=_extract_text(message.content),
        tool_calls=tool_calls,
        stop_reason=metadata.get("stop_reason") or metadata.get("finish_reason"),
    )


class LLMClient:
    """Bridges a free-text user message to tool calls via the chat model."""

    def __init__(
        self,
        provider: LLMProvider,
        database: Database,
        engine: ToolEngine,
        *,
        schema_tables: list[str],
        schema_hint: str = "",
    ) -> None:
        self._provider = provider
        self._database = database
        self._engine = engine
        self._schema_tables = schema_tables
        self._schema_hint = schema_hint

    @property
    def model_name(self) -> str:
        return self._provider.get_model_name()

    def build_system_prompt(self) -> str:
        schema = describe_schema(self._database, self._schema_tables, self._schema_hint)
        logger.debug("Schema info from database:\n%s", schema)
        return _SYSTEM_PROMPT.format(
            database_type=self._database.display_name,
            schema=schema,
        )

    async def process_message(self, message: str) -> LLMResponse:
        """Send one user message and parse the model's reply.

        Raises:
            LLMConfigurationError: If the provider has no credential
            LLMTransportError: If the vendor call fails
            LLMResponseParseError: If the reply is malformed
        """
        if not self._provider.is_configured():
            raise LLMConfigurationError(self._provider.missing_credential_hint())

        system_prompt = await asyncio.to_thread(self.build_system_prompt)
        tools = [
            definition.model_dump() for definition in self._engine.get_available_tools()
        ]

        try:
            model = self._provider.get_chat_model().bind_tools(tools)
            reply = await model.ainvoke(
                [SystemMessage(content=system_prompt), HumanMessage(content=message)]
            )
        except Exception as e:
            logger.exception("LLM request failed (model=%s)", self.model_name)
            raise LLMTransportError(f"LLM request failed: {e}") from e

        response = parse_response(reply)
        logger.info(
            "LLM replied with %d tool call(s) (model=%s, stop_reason=%s)",
            len(response.tool_calls),
            self.model_name,
            response.stop_reason,
        )
        return response
