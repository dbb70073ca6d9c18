"""Tool listing and execution endpoints.

GET  /tools          : Definitions of every registered tool
POST /tools/execute  : Run a batch of tool calls; one result per call, in order
POST /tools/single   : Run one tool call
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.agent.engine import ToolEngine
from app.agent.exceptions import ToolNotFoundError
from app.agent.tools import ToolCall, ToolResult
from app.observability.logger import log_query

logger = logging.getLogger(__name__)

router = APIRouter()


class APIResponse(BaseModel):
    message: str
    data: Any = None
    error: str | None = None


class ToolExecutionRequest(BaseModel):
    tools: list[ToolCall] = Field(default_factory=list)


class ToolExecutionResponse(BaseModel):
    results: list[ToolResult]


def _api_error(status_code: int, message: str, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse(message=message, error=error).model_dump(exclude_none=True),
    )


@router.get("/tools", response_model_exclude_none=True)
def list_tools(request: Request) -> APIResponse:
    engine: ToolEngine = request.app.state.engine
    return APIResponse(message="Available tools", data=engine.get_available_tools())


@router.post("/tools/execute", response_model=None)
def execute_tools(body: ToolExecutionRequest, request: Request) -> JSONResponse:
    settings = request.app.state.settings
    engine: ToolEngine = request.app.state.engine

    if not body.tools:
        return _api_error(400, "No tools provided", "At least one tool must be provided")

    start = time.monotonic()
    results = engine.execute_tools(body.tools)
    failed = [r for r in results if r.is_error]

    log_query(
        settings.query_log_path,
        source="tools",
        query="; ".join(str(call.input.get("query", "")) for call in body.tools),
        tool_calls=len(body.tools),
        latency_ms=(time.monotonic() - start) * 1000,
        status="error" if failed else "success",
        error_message=failed[0].error.message if failed and failed[0].error else None,
    )

    return JSONResponse(
        content=ToolExecutionResponse(results=results).model_dump(exclude_none=True)
    )


@router.post("/tools/single", response_model=None)
def execute_single_tool(body: ToolCall, request: Request) -> JSONResponse:
    engine: ToolEngine = request.app.state.engine

    if not body.name:
        return _api_error(400, "Tool name is required", "Tool name cannot be empty")

    try:
        result = engine.execute_tool(body.name, body.input, call_id=body.id)
    except ToolNotFoundError as e:
        return _api_error(404, "Tool execution failed", str(e))

    return JSONResponse(content=result.model_dump(exclude_none=True))
