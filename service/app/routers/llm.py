"""Natural-language endpoint: message → LLM tool calls → query results.

The model is asked to answer only with ``database_query`` tool calls.
Every call in the reply is executed in order through the tool engine. An
unknown tool name or an ``execution_error`` result aborts the batch with the
results gathered so far; query and validation errors are returned as results.
A reply without tool calls is returned as plain text.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.agent.engine import ToolEngine
from app.agent.exceptions import ToolNotFoundError
from app.guardrails.input_validator import validate_message
from app.llm.client import (
    LLMClient,
    LLMConfigurationError,
    LLMResponseParseError,
    LLMTransportError,
)
from app.observability.logger import log_query

logger = logging.getLogger(__name__)

router = APIRouter()


class MessageRequest(BaseModel):
    message: str = ""


class MessageResponse(BaseModel):
    message: str
    results: list[dict[str, Any]] | None = None
    error: str | None = None


def _respond(status_code: int, body: MessageResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _abort(results: list[dict[str, Any]], error: str) -> JSONResponse:
    """500 carrying the results completed before the failing call."""
    return _respond(
        500,
        MessageResponse(message="Failed to execute tool call", results=results, error=error),
    )


@router.post("/llm/message", response_model=None)
async def process_message(body: MessageRequest, request: Request) -> JSONResponse:
    settings = request.app.state.settings
    client: LLMClient = request.app.state.llm_client
    engine: ToolEngine = request.app.state.engine

    message = validate_message(body.message, settings.max_message_length)

    start = time.monotonic()
    status = "success"
    error_message = None
    executed: list[str] = []

    try:
        try:
            response = await client.process_message(message)
        except LLMConfigurationError as e:
            status, error_message = "error", str(e)
            return _respond(
                400,
                MessageResponse(message="LLM provider not configured", error=str(e)),
            )
        except (LLMTransportError, LLMResponseParseError) as e:
            logger.warning("LLM request failed: %s", e)
            status, error_message = "error", str(e)
            return _respond(
                502,
                MessageResponse(
                    message="Failed to process message with LLM",
                    error="The LLM provider returned an error.",
                ),
            )

        if not response.tool_calls:
            return _respond(200, MessageResponse(message=response.text))

        logger.info("Executing %d tool call(s) from LLM", len(response.tool_calls))
        results: list[dict[str, Any]] = []
        for call in response.tool_calls:
            executed.append(str(call.input.get("query", "")))
            try:
                result = await asyncio.to_thread(
                    engine.execute_tool, call.name, call.input, call_id=call.id
                )
            except ToolNotFoundError as e:
                logger.warning("LLM requested unknown tool %r", e.name)
                status, error_message = "error", str(e)
                return _abort(results, str(e))

            if result.is_error and result.error:
                status, error_message = "error", result.error.message
                # Query and validation failures are data; a dispatch failure ends the batch
                if result.error.type == "execution_error":
                    logger.warning("Tool %s failed, aborting batch", call.name)
                    return _abort(results, result.error.message)
            results.append(result.model_dump(exclude_none=True))

        return _respond(
            200, MessageResponse(message="Query executed successfully", results=results)
        )

    finally:
        log_query(
            settings.query_log_path,
            source="llm",
            query="; ".join(executed) or message,
            model_used=client.model_name,
            tool_calls=len(executed),
            latency_ms=(time.monotonic() - start) * 1000,
            status=status,
            error_message=error_message,
        )
