"""Direct database endpoints for API clients.

POST /db/query   : Run one read-only SELECT through the query tool
GET  /db/schema  : The schema description the LLM is given

Validation failures are input errors (400). Database failures are data:
they come back as a 200 ToolResult with ``error.type == "query_error"``.
"""

from __future__ import annotations

import json
import logging
import time

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.agent.engine import ToolEngine
from app.agent.tools.database_query import TOOL_NAME
from app.db.schema import describe_schema
from app.observability.logger import log_query

logger = logging.getLogger(__name__)

router = APIRouter()


class QueryRequest(BaseModel):
    query: str = ""


@router.post("/db/query", response_model=None)
def query_database(body: QueryRequest, request: Request) -> JSONResponse:
    settings = request.app.state.settings
    engine: ToolEngine = request.app.state.engine

    if not body.query.strip():
        raise HTTPException(status_code=400, detail="Query is required")

    start = time.monotonic()
    result = engine.execute_tool(TOOL_NAME, {"query": body.query})
    latency_ms = (time.monotonic() - start) * 1000

    log_query(
        settings.query_log_path,
        source="direct",
        query=body.query,
        tool_calls=1,
        latency_ms=latency_ms,
        status="error" if result.is_error else "success",
        error_message=result.error.message if result.error else None,
    )

    if result.is_error:
        status_code = 400 if result.error and result.error.type == "validation_error" else 200
        return JSONResponse(
            status_code=status_code,
            content=result.model_dump(exclude_none=True),
        )

    return JSONResponse(content=json.loads(result.content[0].text or "{}"))


@router.get("/db/schema")
def database_schema(request: Request) -> dict:
    settings = request.app.state.settings
    database = request.app.state.database

    return {
        "database_type": database.display_name,
        "schema": describe_schema(
            database, settings.get_schema_tables(), settings.schema_hint
        ),
    }
