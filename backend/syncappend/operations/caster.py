"""In-place column type conversion on staging tables."""

from __future__ import annotations

import logging
from typing import Optional

import duckdb

from syncappend.core.types import TypeCatalog
from syncappend.errors import CastError, CatalogError
from syncappend.sql import qualify, quote_identifier

logger = logging.getLogger(__name__)

_TRUE_LITERALS = ("true", "t", "yes", "y", "1")
_FALSE_LITERALS = ("false", "f", "no", "n", "0")

# Logical types whose physical variants can be cast back and compared.
_ROUND_TRIP_TYPES = ("number", "string", "date")


class ColumnTypecaster:
    """
    Rewrites one staging column to the physical type of a logical type.

    Values must survive the conversion: if any non-null value would become
    NULL (or, within the number, string or date family, would not cast back
    to its original value) the cast is refused with a CastError and the
    table is left untouched.
    """

    def __init__(self, conn: duckdb.DuckDBPyConnection, catalog: TypeCatalog) -> None:
        self.conn = conn
        self.catalog = catalog

    def cast(
        self,
        schema_name: str,
        table_name: str,
        column_name: str,
        logical_type: str,
        physical_type: Optional[str] = None,
    ) -> str:
        """
        Convert ``column_name`` in place.

        Args:
            schema_name: Staging schema
            table_name: Staging table
            column_name: Column to convert
            logical_type: Target logical type (drives the conversion rules)
            physical_type: Exact target physical type; defaults to the
                catalog's canonical type for ``logical_type``

        Returns:
            The physical type the column now has

        Raises:
            CastError: If the conversion would lose values or fails
            CatalogError: If the column does not exist
        """
        target_type = physical_type or self.catalog.physical_type_for(logical_type)
        table = qualify(schema_name, table_name)
        qualified_name = f"{schema_name}.{table_name}"

        current_type = self._current_type(schema_name, table_name, column_name)
        source_logical = self.catalog.logical_type_for(current_type)
        expression = self._conversion_expression(column_name, logical_type, target_type)

        lossy_predicate = f"({expression}) IS NULL"
        if source_logical == logical_type and logical_type in _ROUND_TRIP_TYPES:
            # Narrowing within a family (2.5 -> BIGINT, 13:45 -> DATE) succeeds
            # without NULLs; the value must survive the cast back.
            lossy_predicate += (
                f" OR CAST(({expression}) AS {current_type}) <> {quote_identifier(column_name)}"
            )

        try:
            row = self.conn.execute(
                f"""
                SELECT COUNT(*) FROM {table}
                WHERE {quote_identifier(column_name)} IS NOT NULL
                  AND ({lossy_predicate})
                """
            ).fetchone()
        except duckdb.Error as e:
            raise CastError(qualified_name, column_name, target_type, str(e)) from e

        lossy_rows = int(row[0]) if row else 0
        if lossy_rows:
            raise CastError(
                qualified_name,
                column_name,
                target_type,
                f"{lossy_rows} value(s) cannot be represented as {logical_type}",
            )

        try:
            self.conn.execute(
                f"ALTER TABLE {table} "
                f"ALTER COLUMN {quote_identifier(column_name)} SET DATA TYPE {target_type} "
                f"USING {expression}"
            )
        except duckdb.Error as e:
            raise CastError(qualified_name, column_name, target_type, str(e)) from e

        logger.info(
            "Cast %s.%s from %s to %s", qualified_name, column_name, current_type, target_type
        )
        return target_type

    def _current_type(self, schema_name: str, table_name: str, column_name: str) -> str:
        row = self.conn.execute(
            """
            SELECT data_type
            FROM information_schema.columns
            WHERE table_schema = ? AND table_name = ? AND column_name = ?
            """,
            [schema_name, table_name, column_name],
        ).fetchone()
        if row is None:
            raise CatalogError(
                f"{schema_name}.{table_name}", f"column '{column_name}' does not exist"
            )
        return str(row[0])

    def _conversion_expression(self, column_name: str, logical_type: str, target_type: str) -> str:
        column = quote_identifier(column_name)
        if logical_type == "boolean":
            text = f"lower(trim(CAST({column} AS VARCHAR)))"
            truthy = ", ".join(f"'{v}'" for v in _TRUE_LITERALS)
            falsy = ", ".join(f"'{v}'" for v in _FALSE_LITERALS)
            return (
                f"CASE WHEN {text} IN ({truthy}) THEN TRUE "
                f"WHEN {text} IN ({falsy}) THEN FALSE END"
            )
        return f"TRY_CAST({column} AS {target_type})"
