"""Point-in-time column schema snapshots read from the DuckDB catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import duckdb

from syncappend.core.types import TypeCatalog
from syncappend.errors import CatalogError


@dataclass(frozen=True)
class ColumnMetadata:
    """A column's name with its physical and logical type."""

    name: str
    physical_type: str
    logical_type: Optional[str] = None


@dataclass(frozen=True)
class SchemaSnapshot:
    """
    Read-only view of a table's columns at the time it was captured.

    A snapshot never refreshes itself; call ``snapshot()`` again to observe
    later changes (for example after columns have been added).
    """

    schema_name: str
    table_name: str
    columns: Tuple[ColumnMetadata, ...] = field(default_factory=tuple)

    @property
    def types(self) -> Dict[str, str]:
        """Column name -> physical type, in table order."""
        return {c.name: c.physical_type for c in self.columns}

    @property
    def names(self) -> List[str]:
        return [c.name for c in self.columns]

    def get(self, column_name: str) -> Optional[ColumnMetadata]:
        for column in self.columns:
            if column.name == column_name:
                return column
        return None

    def __contains__(self, column_name: object) -> bool:
        return any(c.name == column_name for c in self.columns)

    def __iter__(self) -> Iterator[ColumnMetadata]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __repr__(self) -> str:
        return f"SchemaSnapshot({self.schema_name}.{self.table_name}, {len(self.columns)} columns)"


def snapshot(
    conn: duckdb.DuckDBPyConnection,
    table_name: str,
    schema_name: str,
    catalog: Optional[TypeCatalog] = None,
) -> SchemaSnapshot:
    """
    Read a table's column metadata from ``information_schema``.

    Always hits the catalog; nothing is cached between calls.

    Args:
        conn: DuckDB connection
        table_name: Table to introspect
        schema_name: Schema containing the table
        catalog: Optional type catalog used to attach logical types

    Returns:
        SchemaSnapshot with columns in ordinal order

    Raises:
        CatalogError: If the table does not exist or cannot be introspected
    """
    qualified = f"{schema_name}.{table_name}"
    try:
        rows = conn.execute(
            """
            SELECT column_name, data_type
            FROM information_schema.columns
            WHERE table_schema = ? AND table_name = ?
            ORDER BY ordinal_position
            """,
            [schema_name, table_name],
        ).fetchall()
    except duckdb.Error as e:
        raise CatalogError(qualified, str(e)) from e

    if not rows:
        raise CatalogError(qualified, "table does not exist or has no columns")

    columns = tuple(
        ColumnMetadata(
            name=str(column_name),
            physical_type=str(data_type),
            logical_type=catalog.logical_type_for(str(data_type)) if catalog else None,
        )
        for column_name, data_type in rows
    )
    return SchemaSnapshot(schema_name=schema_name, table_name=table_name, columns=columns)
