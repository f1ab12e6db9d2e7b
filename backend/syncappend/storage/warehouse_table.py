"""DuckDB-backed destination table."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Callable, Optional

import duckdb

from syncappend.config import get_settings
from syncappend.core.schema import SchemaSnapshot, snapshot
from syncappend.core.types import TypeCatalog
from syncappend.errors import CatalogError
from syncappend.sql import qualify, quote_identifier
from syncappend.storage.base import DestinationTable

logger = logging.getLogger(__name__)

CacheInvalidator = Callable[[str], None]


class WarehouseTable(DestinationTable):
    """
    A user table living in the DuckDB warehouse.

    Lives in ``schemas.destination`` from the settings unless ``schema_name``
    is given.

    Example:
        >>> table = WarehouseTable(conn, "places", catalog=default_catalog())
        >>> table.add_column("price", "number")
        >>> table.columns.types["price"]
        'DOUBLE'
    """

    def __init__(
        self,
        conn: duckdb.DuckDBPyConnection,
        name: str,
        *,
        catalog: TypeCatalog,
        schema_name: Optional[str] = None,
        owner: Optional[str] = None,
        invalidator: Optional[CacheInvalidator] = None,
    ) -> None:
        self.conn = conn
        self.name = name
        self.schema_name = schema_name or get_settings().schemas.destination
        self.owner = owner
        self.catalog = catalog
        self.invalidator = invalidator

        self.table_id: Optional[int] = None
        self.columns: Optional[SchemaSnapshot] = None
        self.geometry_column: Optional[str] = None
        self.row_count: Optional[int] = None
        self.imported_from: Optional[str] = None
        self.imported_at: Optional[datetime] = None

        self.refresh_identity()
        self.reload()

    @property
    def qualified_name(self) -> str:
        return qualify(self.schema_name, self.name)

    def add_column(self, name: str, logical_type: str) -> None:
        physical_type = self.catalog.physical_type_for(logical_type)
        try:
            self.conn.execute(
                f"ALTER TABLE {self.qualified_name} "
                f"ADD COLUMN {quote_identifier(name)} {physical_type}"
            )
        except duckdb.Error as e:
            raise CatalogError(f"{self.schema_name}.{self.name}", str(e)) from e
        logger.info("Added column %s %s to %s.%s", name, physical_type, self.schema_name, self.name)

    def refresh_identity(self) -> None:
        row = self.conn.execute(
            """
            SELECT table_oid
            FROM duckdb_tables()
            WHERE schema_name = ? AND table_name = ?
            """,
            [self.schema_name, self.name],
        ).fetchone()
        if row is None:
            raise CatalogError(f"{self.schema_name}.{self.name}", "table does not exist")
        self.table_id = int(row[0])

    def reload(self) -> None:
        self.columns = snapshot(self.conn, self.name, self.schema_name, self.catalog)

    def mark_imported(self, staging_name: str) -> None:
        self.imported_from = staging_name
        self.imported_at = datetime.now(UTC)

    def refresh_derived_state(self) -> None:
        columns = self.columns or snapshot(self.conn, self.name, self.schema_name, self.catalog)
        self.geometry_column = next(
            (c.name for c in columns if c.logical_type == "geometry"),
            None,
        )

        row = self.conn.execute(f"SELECT COUNT(*) FROM {self.qualified_name}").fetchone()
        self.row_count = int(row[0]) if row else 0

    def invalidate_cache(self) -> None:
        if self.invalidator is None:
            return
        self.invalidator(f"{self.schema_name}.{self.name}")

    def __repr__(self) -> str:
        return f"WarehouseTable({self.schema_name}.{self.name}, id={self.table_id})"
