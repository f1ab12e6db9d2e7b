"""Shared fixtures for syncappend tests."""

from pathlib import Path
from typing import List

import duckdb
import pytest

from syncappend import SyncAppendSettings, TypeCatalog, default_catalog, get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop the cached settings so env overrides apply per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def conn(tmp_path: Path) -> duckdb.DuckDBPyConnection:
    """Create a temporary DuckDB warehouse connection."""
    connection = duckdb.connect(str(tmp_path / "test_warehouse.duckdb"))
    yield connection
    connection.close()


@pytest.fixture
def catalog() -> TypeCatalog:
    return default_catalog()


@pytest.fixture
def settings() -> SyncAppendSettings:
    return SyncAppendSettings()


@pytest.fixture
def places(conn: duckdb.DuckDBPyConnection) -> str:
    """A managed destination table with two rows."""
    conn.execute("CREATE SEQUENCE places_id_seq")
    conn.execute(
        """
        CREATE TABLE places (
            cartodb_id BIGINT DEFAULT nextval('places_id_seq'),
            id INTEGER,
            name VARCHAR,
            age DOUBLE,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT current_timestamp,
            updated_at TIMESTAMP WITH TIME ZONE DEFAULT current_timestamp
        )
        """
    )
    conn.execute("INSERT INTO places (id, name, age) VALUES (1, 'Alice', 30), (2, 'Bob', 41)")
    return "places"


def _column_types(conn: duckdb.DuckDBPyConnection, table: str, schema: str = "main") -> dict:
    rows = conn.execute(
        """
        SELECT column_name, data_type
        FROM information_schema.columns
        WHERE table_schema = ? AND table_name = ?
        ORDER BY ordinal_position
        """,
        [schema, table],
    ).fetchall()
    return {name: data_type for name, data_type in rows}


def _table_exists(conn: duckdb.DuckDBPyConnection, table: str, schema: str) -> bool:
    row = conn.execute(
        "SELECT COUNT(*) FROM information_schema.tables WHERE table_schema = ? AND table_name = ?",
        [schema, table],
    ).fetchone()
    return row[0] > 0


class RecordingReporter:
    """ErrorReporter that keeps every report."""

    def __init__(self) -> None:
        self.reports: List[dict] = []

    def report(self, message: str, *, level: str = "error", **info) -> None:
        self.reports.append({"message": message, "level": level, **info})


@pytest.fixture
def column_types():
    """Helper: ``column_types(conn, table, schema="main") -> {name: type}``."""
    return _column_types


@pytest.fixture
def table_exists():
    """Helper: ``table_exists(conn, table, schema) -> bool``."""
    return _table_exists


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()
