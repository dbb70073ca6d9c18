"""Application settings loaded from environment variables.

Uses Pydantic BaseSettings so values can come from env vars, .env files,
or defaults. All settings are validated at startup; fail fast if the
database or schema configuration is unusable.
"""

import re
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_DEFAULT_PORTS = {"mysql": 3306, "postgres": 5432}

_DEFAULT_SCHEMA_HINT = (
    'The days_available column contains comma-separated values like '
    '"Monday, Tuesday, Wednesday".'
)


class Settings(BaseSettings):
    """Data Chatter gateway configuration."""

    model_config = {"env_prefix": "DATACHATTER_", "env_file": ".env", "extra": "ignore"}

    # Database: "sqlite", "mysql" or "postgres"
    db_type: Literal["sqlite", "mysql", "postgres"] = "sqlite"
    db_file: str = "./contacts.db"
    db_host: str = "localhost"
    db_port: int | None = None
    db_user: str = ""
    db_password: str = ""
    db_name: str = "data_chatter"
    db_sslmode: str = "disable"
    # Full SQLAlchemy URL; overrides the individual fields above when set
    database_url: str = ""

    # Connection pool
    db_max_conns: int = 10
    db_max_idle: int = 5
    db_conn_max_lifetime_seconds: int = 3600

    # Schema description handed to the LLM
    schema_tables: str = "contacts"
    schema_hint: str = _DEFAULT_SCHEMA_HINT

    # LLM provider: "anthropic", "openrouter" or "vertex_ai"
    llm_provider: str = "anthropic"
    llm_max_tokens: int = 1000

    # Anthropic (direct)
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-5-sonnet-20241022"

    # OpenRouter (Claude via OpenAI-compatible API)
    openrouter_api_key: str = ""
    openrouter_model: str = "anthropic/claude-sonnet-4-20250514"

    # Vertex AI (Gemini)
    gcp_project: str = ""
    gcp_region: str = "us-east1"
    vertex_model: str = "gemini-2.0-flash"

    # SQL policy: "keyword" is the prefix + forbidden-keyword filter only;
    # "parse" additionally requires a single SELECT statement via sqlglot
    sql_policy_mode: Literal["keyword", "parse"] = "keyword"

    # Input validation
    max_message_length: int = 1000

    # Rate limiting (in-memory sliding window, per client IP)
    rate_limit_llm_per_min: int = 20

    cors_allow_origins: str = "*"

    # Observability: empty string means the query log is disabled
    query_log_path: str = ""
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _validate_database(self) -> "Settings":
        """Pool sizes and schema table names are checked up front."""
        if self.db_max_conns <= 0:
            raise ValueError("db_max_conns must be greater than 0.")

        if self.db_max_idle < 0 or self.db_max_idle > self.db_max_conns:
            raise ValueError(
                "db_max_idle must be between 0 and db_max_conns."
            )

        if self.db_type != "sqlite" and not self.database_url and not self.db_name:
            raise ValueError(
                f"db_name is required when db_type is '{self.db_type}'."
            )

        for table in self.get_schema_tables():
            if not _IDENTIFIER_RE.match(table):
                raise ValueError(
                    f"schema_tables entry {table!r} is not a plain SQL identifier."
                )
        return self

    def get_schema_tables(self) -> list[str]:
        """Parse schema_tables into an ordered list of table names."""
        return [t.strip() for t in self.schema_tables.split(",") if t.strip()]

    def get_cors_origins(self) -> list[str]:
        """Parse cors_allow_origins into a list."""
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]

    def get_database_url(self) -> str:
        """Build the SQLAlchemy URL for the configured database."""
        if self.database_url:
            return self.database_url

        if self.db_type == "sqlite":
            return f"sqlite:///{self.db_file}"

        if self.db_type == "mysql":
            drivername = "mysql+pymysql"
            query = {"charset": "utf8mb4"}
        else:
            drivername = "postgresql+psycopg2"
            query = {"sslmode": self.db_sslmode}

        url = URL.create(
            drivername,
            username=self.db_user or None,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port or _DEFAULT_PORTS[self.db_type],
            database=self.db_name,
            query=query,
        )
        return url.render_as_string(hide_password=False)
