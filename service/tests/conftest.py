"""Shared test fixtures for the gateway.

Tests run against an in-memory SQLite database (one shared connection via
StaticPool) seeded with a small ``contacts`` table. No test talks to a
real LLM vendor.
"""

from collections.abc import Iterator

import pytest

from app.agent.engine import ToolEngine
from app.config import Settings
from app.db.connection import Database, create_database

CONTACTS_DDL = """\
CREATE TABLE contacts (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    phone_number TEXT,
    email TEXT,
    days_available TEXT,
    photo BLOB
)"""

CONTACTS = [
    (1, "Alice Johnson", "555-0101", "alice@example.com", "Monday, Wednesday", b"alice.png"),
    (2, "Bob Smith", "555-0102", None, "Tuesday, Thursday", None),
    (3, "Carol White", "555-0103", "carol@example.com", "Monday, Friday", None),
    (4, "Dan Brown", "555-0104", "dan@example.com", "Monday, Tuesday, Wednesday", None),
    (5, "Eve Davis", "555-0105", "eve@example.com", "Saturday", None),
]


@pytest.fixture
def settings() -> Settings:
    """Minimal settings for unit tests: in-memory SQLite, fake credentials."""
    return Settings(
        db_type="sqlite",
        db_file=":memory:",
        llm_provider="anthropic",
        anthropic_api_key="test-key",
        openrouter_api_key="test-key",
        gcp_project="test-project",
        query_log_path="",
    )


@pytest.fixture
def database(settings: Settings) -> Iterator[Database]:
    db = create_database(settings)
    with db.engine.begin() as conn:
        conn.exec_driver_sql(CONTACTS_DDL)
        conn.exec_driver_sql(
            "INSERT INTO contacts (id, name, phone_number, email, days_available, photo) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            CONTACTS,
        )
    yield db
    db.close()


@pytest.fixture
def engine(database: Database) -> ToolEngine:
    return ToolEngine(database)
