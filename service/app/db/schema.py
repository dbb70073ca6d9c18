"""Human-readable schema description for the LLM system prompt.

Each dialect has its own introspection query; all three are reduced to
the same line format:

    - <column> (<declared type>, NULL | NOT NULL[, PRIMARY KEY])

Table names come from configuration (validated as plain identifiers in
Settings), so they are interpolated into PRAGMA/DESCRIBE directly.
On PostgreSQL only the first schema on the search_path is described.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.db.connection import Database

logger = logging.getLogger(__name__)

SCHEMA_UNAVAILABLE = "Failed to get database schema"

_POSTGRES_COLUMNS_SQL = """\
SELECT c.column_name,
       c.data_type,
       c.is_nullable,
       EXISTS (
           SELECT 1
           FROM information_schema.table_constraints tc
           JOIN information_schema.key_column_usage kcu
             ON tc.constraint_name = kcu.constraint_name
            AND tc.table_schema = kcu.table_schema
           WHERE tc.constraint_type = 'PRIMARY KEY'
             AND tc.table_schema = c.table_schema
             AND tc.table_name = c.table_name
             AND kcu.table_name = c.table_name
             AND kcu.column_name = c.column_name
       ) AS is_primary
FROM information_schema.columns c
WHERE c.table_name = :table_name
  AND c.table_schema = current_schema()
ORDER BY c.ordinal_position
"""


def _as_str(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _format_column(name: Any, data_type: Any, not_null: bool, primary_key: bool) -> str:
    nullable = "NOT NULL" if not_null else "NULL"
    suffix = ", PRIMARY KEY" if primary_key else ""
    return f"- {_as_str(name)} ({_as_str(data_type)}, {nullable}{suffix})"


def _sqlite_columns(conn: Any, table: str) -> list[str]:
    # cid, name, type, notnull, dflt_value, pk
    lines = []
    for row in conn.exec_driver_sql(f"PRAGMA table_info({table})"):
        if len(row) < 6:
            logger.debug("Skipping unexpected PRAGMA row: %r", row)
            continue
        lines.append(_format_column(row[1], row[2], row[3] == 1, row[5] > 0))
    return lines


def _mysql_columns(conn: Any, table: str) -> list[str]:
    # Field, Type, Null, Key, Default, Extra
    lines = []
    for row in conn.exec_driver_sql(f"DESCRIBE {table}"):
        if len(row) < 4:
            logger.debug("Skipping unexpected DESCRIBE row: %r", row)
            continue
        lines.append(
            _format_column(row[0], row[1], _as_str(row[2]) == "NO", _as_str(row[3]) == "PRI")
        )
    return lines


def _postgres_columns(conn: Any, table: str) -> list[str]:
    lines = []
    for row in conn.execute(text(_POSTGRES_COLUMNS_SQL), {"table_name": table}):
        if len(row) < 4:
            logger.debug("Skipping unexpected information_schema row: %r", row)
            continue
        lines.append(_format_column(row[0], row[1], row[2] == "NO", bool(row[3])))
    return lines


_INTROSPECTORS = {
    "sqlite": _sqlite_columns,
    "mysql": _mysql_columns,
    "postgres": _postgres_columns,
}


def describe_schema(database: Database, tables: Sequence[str], hint: str = "") -> str:
    """Describe ``tables`` for the configured dialect.

    Returns SCHEMA_UNAVAILABLE if the database cannot be introspected.
    """
    introspect = _INTROSPECTORS.get(database.dialect)
    if introspect is None:
        logger.error("No schema introspection for dialect %r", database.dialect)
        return SCHEMA_UNAVAILABLE

    parts = ["Database Schema:"]
    try:
        with database.connect() as conn:
            for table in tables:
                parts.append(f"Table: {table}")
                parts.append("Columns:")
                parts.extend(introspect(conn, table))
    except SQLAlchemyError:
        logger.exception("Schema introspection failed")
        return SCHEMA_UNAVAILABLE

    description = "\n".join(parts) + "\n"
    if hint:
        description += f"\n{hint}"
    return description
