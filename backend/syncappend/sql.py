"""Identifier quoting helpers shared by the DDL/DML builders."""

from __future__ import annotations


def quote_identifier(identifier: str) -> str:
    """Quote a single SQL identifier safely for DuckDB."""
    escaped = identifier.replace('"', '""')
    return f'"{escaped}"'


def qualify(schema_name: str, table_name: str) -> str:
    """Return a quoted ``schema.table`` reference."""
    return f"{quote_identifier(schema_name)}.{quote_identifier(table_name)}"
