"""Tests for application config validation: fail fast on invalid settings."""

import pytest
from pydantic import ValidationError

from app.config import Settings


class TestDatabaseValidation:
    def test_defaults(self) -> None:
        s = Settings()
        assert s.db_type == "sqlite"
        assert s.sql_policy_mode == "keyword"
        assert s.get_database_url() == "sqlite:///./contacts.db"

    def test_invalid_db_type_rejected(self) -> None:
        with pytest.raises(ValidationError, match="db_type"):
            Settings(db_type="oracle")

    def test_max_conns_must_be_positive(self) -> None:
        with pytest.raises(ValidationError, match="db_max_conns"):
            Settings(db_max_conns=0)

    def test_idle_cannot_exceed_max_conns(self) -> None:
        with pytest.raises(ValidationError, match="db_max_idle"):
            Settings(db_max_conns=2, db_max_idle=3)

    def test_negative_idle_rejected(self) -> None:
        with pytest.raises(ValidationError, match="db_max_idle"):
            Settings(db_max_idle=-1)

    def test_db_name_required_for_server_databases(self) -> None:
        with pytest.raises(ValidationError, match="db_name"):
            Settings(db_type="postgres", db_name="")

    def test_database_url_overrides_db_name(self) -> None:
        s = Settings(db_type="postgres", db_name="", database_url="postgresql://u@h/d")
        assert s.get_database_url() == "postgresql://u@h/d"


class TestDatabaseURL:
    def test_mysql_url(self) -> None:
        s = Settings(
            db_type="mysql", db_host="db", db_user="app", db_password="secret", db_name="contacts"
        )
        assert s.get_database_url() == (
            "mysql+pymysql://app:secret@db:3306/contacts?charset=utf8mb4"
        )

    def test_postgres_url_with_sslmode(self) -> None:
        s = Settings(
            db_type="postgres",
            db_host="db",
            db_port=6543,
            db_user="app",
            db_name="contacts",
            db_sslmode="require",
        )
        assert s.get_database_url() == (
            "postgresql+psycopg2://app@db:6543/contacts?sslmode=require"
        )

    def test_password_is_escaped(self) -> None:
        s = Settings(db_type="postgres", db_user="app", db_password="p@ss/word", db_name="x")
        assert "p%40ss%2Fword" in s.get_database_url()


class TestSchemaSettings:
    def test_schema_tables_parsed(self) -> None:
        s = Settings(schema_tables=" contacts , orders ")
        assert s.get_schema_tables() == ["contacts", "orders"]

    def test_schema_table_must_be_identifier(self) -> None:
        with pytest.raises(ValidationError, match="schema_tables"):
            Settings(schema_tables="contacts; DROP TABLE x")

    def test_default_hint_mentions_days_available(self) -> None:
        assert "days_available" in Settings().schema_hint


class TestMiscSettings:
    def test_invalid_policy_mode_rejected(self) -> None:
        with pytest.raises(ValidationError, match="sql_policy_mode"):
            Settings(sql_policy_mode="yolo")

    def test_cors_origins_parsed(self) -> None:
        s = Settings(cors_allow_origins="http://a.test, http://b.test")
        assert s.get_cors_origins() == ["http://a.test", "http://b.test"]

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATACHATTER_MAX_MESSAGE_LENGTH", "42")
        assert Settings().max_message_length == 42
