"""Pooled database connection for SQLite, MySQL and PostgreSQL.

Wraps a SQLAlchemy Engine together with the configured dialect name, which
the query tool uses for parse-mode validation and the schema module uses
to pick its introspection query. Connections are checked out per query and
returned to the pool on release; nothing is committed.

An in-memory SQLite database lives on a single shared DBAPI connection, so
checkouts from it are serialized with a lock. Other configurations use a
regular pool and do not lock.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

from app.config import Settings

logger = logging.getLogger(__name__)

DIALECT_DISPLAY_NAMES = {
    "sqlite": "SQLite",
    "mysql": "MySQL",
    "postgres": "PostgreSQL",
}


class Database:
    """A SQLAlchemy engine plus the dialect it was configured for."""

    def __init__(self, engine: Engine, dialect: str, *, serialize: bool = False) -> None:
        self.engine = engine
        self.dialect = dialect
        self._lock = threading.RLock() if serialize else None

    @property
    def display_name(self) -> str:
        return DIALECT_DISPLAY_NAMES.get(self.dialect, self.dialect)

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Check out a pooled connection for the duration of a with-block."""
        if self._lock is None:
            with self.engine.connect() as conn:
                yield conn
            return
        with self._lock, self.engine.connect() as conn:
            yield conn

    def health(self) -> None:
        """Round-trip a trivial query; raises on failure."""
        with self.connect() as conn:
            conn.exec_driver_sql("SELECT 1").close()

    def close(self) -> None:
        self.engine.dispose()


def create_database(settings: Settings) -> Database:
    """Factory: build the engine and pool for the configured database."""
    url = settings.get_database_url()
    in_memory = (
        settings.db_type == "sqlite"
        and settings.db_file == ":memory:"
        and not settings.database_url
    )

    if in_memory:
        # Every pooled connection would otherwise see its own empty database
        engine = create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        connect_args = {"check_same_thread": False} if settings.db_type == "sqlite" else {}
        engine = create_engine(
            url,
            pool_size=max(settings.db_max_idle, 1),
            max_overflow=max(settings.db_max_conns - settings.db_max_idle, 0),
            pool_recycle=settings.db_conn_max_lifetime_seconds,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

    database = Database(engine, settings.db_type, serialize=in_memory)
    database.health()

    if settings.db_type == "sqlite":
        logger.info("Connected to SQLite database: %s", settings.db_file)
    else:
        logger.info(
            "Connected to %s database: %s@%s/%s",
            settings.db_type,
            settings.db_user,
            settings.db_host,
            settings.db_name,
        )
    return database
