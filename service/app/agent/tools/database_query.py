"""Read-only SQL query tool.

Validates a caller-supplied SQL string, runs it against the configured
database, and returns the rows as a pretty-printed JSON document.

Validation is a keyword filter, not a grammar check:
  1. ``query`` must be a non-empty string
  2. first token must be SELECT (case-insensitive, whitespace-trimmed)
  3. DROP, DELETE, UPDATE, INSERT, ALTER, CREATE, TRUNCATE must not appear
     anywhere in the upper-cased text. This is a plain substring scan, so
     ``SELECT * FROM updates`` and ``created_at`` are rejected too
  4. "parse" policy only: sqlglot must parse exactly one SELECT/UNION

The query text is executed exactly as given, including any LIMIT clause;
none is added. Database failures never raise; they come back as
``query_error`` results. Non-finite floats are returned as null.
"""

from __future__ import annotations

import json
import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Any

import sqlglot
from sqlalchemy.exc import SQLAlchemyError
from sqlglot import exp

from app.agent.exceptions import ToolValidationError
from app.agent.tools import ToolDefinition, ToolExecutor, ToolResult
from app.db.connection import Database

logger = logging.getLogger(__name__)

TOOL_NAME = "database_query"

FORBIDDEN_KEYWORDS: tuple[str, ...] = (
    "DROP",
    "DELETE",
    "UPDATE",
    "INSERT",
    "ALTER",
    "CREATE",
    "TRUNCATE",
)

_SELECT_RE = re.compile(r"SELECT\b")

_SQLGLOT_DIALECTS = {
    "sqlite": "sqlite",
    "mysql": "mysql",
    "postgres": "postgres",
}


class SQLValidationError(ToolValidationError):
    """Raised when a query fails validation."""


class InvalidQueryError(SQLValidationError):
    code = "invalid_input"


class ForbiddenStatementError(SQLValidationError):
    code = "forbidden_statement"


class ForbiddenKeywordError(SQLValidationError):
    code = "forbidden_keyword"

    def __init__(self, keyword: str) -> None:
        super().__init__(f"query contains forbidden keyword: {keyword}")
        self.keyword = keyword


class SQLParseError(SQLValidationError):
    code = "parse_error"


def validate_query(
    tool_input: dict[str, Any],
    *,
    policy_mode: str = "keyword",
    dialect: str = "sqlite",
) -> str:
    """Check a tool input and return its query string unchanged.

    Raises a SQLValidationError subclass on any failure.
    """
    if policy_mode not in ("keyword", "parse"):
        raise SQLValidationError(
            f"Unknown sql_policy_mode '{policy_mode}'. Must be 'keyword' or 'parse'."
        )

    query = tool_input.get("query")
    if not isinstance(query, str):
        raise InvalidQueryError("query must be a string")

    normalized = query.strip().upper()
    if not normalized:
        raise InvalidQueryError("query cannot be empty")

    if not _SELECT_RE.match(normalized):
        raise ForbiddenStatementError("only SELECT queries are allowed")

    for keyword in FORBIDDEN_KEYWORDS:
        if keyword in normalized:
            raise ForbiddenKeywordError(keyword)

    if policy_mode == "parse":
        _check_single_select(query, dialect)

    return query


def _check_single_select(query: str, dialect: str) -> None:
    try:
        statements = sqlglot.parse(query, dialect=_SQLGLOT_DIALECTS.get(dialect))
    except sqlglot.errors.SqlglotError as e:
        raise SQLParseError(f"SQL parse error: {e}") from e

    # Trailing semicolons produce empty statements
    statements = [s for s in statements if s is not None]

    if len(statements) != 1:
        raise ForbiddenStatementError(
            f"Only single SQL statements are allowed. Got {len(statements)} statements."
        )

    if not isinstance(statements[0], (exp.Select, exp.Union)):
        raise ForbiddenStatementError(
            f"only SELECT queries are allowed. Got: {type(statements[0]).__name__}"
        )


def to_json_value(value: Any) -> Any:
    """Convert one column value into something JSON can carry."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat(timespec="seconds").replace("+00:00", "Z")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and not math.isfinite(value):
        # JSON has no Infinity or NaN
        return None
    return value


class DatabaseQueryTool(ToolExecutor):
    """Executes read-only SELECT queries against one database."""

    def __init__(self, database: Database, *, policy_mode: str = "keyword") -> None:
        self._database = database
        self._policy_mode = policy_mode

    def get_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=TOOL_NAME,
            description="Execute a read-only SQL SELECT query on the database",
            input_schema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "SQL SELECT query to execute (include LIMIT clause if needed)",
                    },
                },
                "required": ["query"],
            },
        )

    def validate(self, tool_input: dict[str, Any]) -> None:
        validate_query(
            tool_input,
            policy_mode=self._policy_mode,
            dialect=self._database.dialect,
        )

    def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        query = tool_input["query"]
        logger.debug("Executing query: %s", query)

        try:
            with self._database.connect() as conn:
                result = conn.execution_options(no_parameters=True).exec_driver_sql(query)
                return self._collect(query, result)
        except SQLAlchemyError as e:
            logger.warning("Query execution failed: %s", e)
            return _query_error("Query execution failed", e)

    def _collect(self, query: str, result: Any) -> ToolResult:
        try:
            columns = list(result.keys())
        except SQLAlchemyError as e:
            logger.warning("Failed to get column names: %s", e)
            return _query_error("Failed to get column names", e)

        data: list[dict[str, Any]] = []
        try:
            for row in result:
                data.append(
                    {col: to_json_value(value) for col, value in zip(columns, row)}
                )
        except SQLAlchemyError as e:
            logger.warning("Error iterating rows: %s", e)
            return _query_error("Error iterating rows", e)

        document = {
            "query": query,
            "columns": columns,
            "row_count": len(data),
            "data": data,
        }
        return ToolResult.from_text(
            json.dumps(document, indent=2, default=str, allow_nan=False)
        )


def _query_error(stage: str, error: Exception) -> ToolResult:
    return ToolResult.failure("query_error", str(error), f"{stage}: {error}")
