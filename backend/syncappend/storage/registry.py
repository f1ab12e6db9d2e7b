"""Table metadata registry (last-modified bookkeeping per table)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional

import duckdb

from syncappend.sql import qualify, quote_identifier


class MetadataRegistry:
    """
    Registry of ``(tabname, updated_at)`` rows keyed by table identity.

    Consumers read it to learn when a table last changed.
    """

    def __init__(
        self,
        conn: duckdb.DuckDBPyConnection,
        schema_name: str = "_syncappend",
        table_name: str = "table_metadata",
    ) -> None:
        self.conn = conn
        self.schema_name = schema_name
        self.table_name = table_name
        self._ensure_table()

    @property
    def qualified_name(self) -> str:
        return qualify(self.schema_name, self.table_name)

    def _ensure_table(self) -> None:
        self.conn.execute(f"CREATE SCHEMA IF NOT EXISTS {quote_identifier(self.schema_name)}")
        self.conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.qualified_name} (
                tabname TEXT PRIMARY KEY,
                updated_at TIMESTAMP WITH TIME ZONE NOT NULL
            )
            """
        )

    def upsert(self, tabname: str) -> datetime:
        """Insert the row for ``tabname`` or bump its ``updated_at``."""
        now = datetime.now(UTC)
        self.conn.execute(
            f"""
            INSERT INTO {self.qualified_name} (tabname, updated_at)
            VALUES (?, ?)
            ON CONFLICT (tabname) DO UPDATE SET
                updated_at = EXCLUDED.updated_at
            """,
            [tabname, now],
        )
        return now

    def get(self, tabname: str) -> Optional[datetime]:
        row = self.conn.execute(
            f"SELECT updated_at FROM {self.qualified_name} WHERE tabname = ?",
            [tabname],
        ).fetchone()
        return row[0] if row else None
