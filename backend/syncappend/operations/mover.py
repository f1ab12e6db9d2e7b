"""Bulk row copy from a staging table into the destination."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import duckdb
from sqlglot import exp

from syncappend.errors import MoveError

logger = logging.getLogger(__name__)


def build_insert_sql(
    destination_schema: str,
    destination_table: str,
    staging_schema: str,
    staging_table: str,
    columns: Sequence[str],
    target_columns: Optional[Sequence[str]] = None,
) -> str:
    """
    Build ``INSERT INTO dest (targets) SELECT columns FROM staging`` for DuckDB.

    ``target_columns`` names the destination spelling of each staging column
    and defaults to ``columns``. Every identifier is quoted, so column names
    need no sanitizing.

    Examples:
        >>> build_insert_sql("main", "places", "staging", "s1", ["Name", "price"], ["name", "price"])
        'INSERT INTO "main"."places" ("name", "price") SELECT "Name", "price" FROM "staging"."s1"'
    """
    if not columns:
        raise ValueError("At least one column is required to move rows")
    targets = list(target_columns) if target_columns is not None else list(columns)
    if len(targets) != len(columns):
        raise ValueError("Target columns must pair up with the staging columns")

    select = exp.select(*[exp.column(c, quoted=True) for c in columns]).from_(
        exp.table_(staging_table, db=staging_schema, quoted=True)
    )
    insert = exp.insert(
        select,
        exp.table_(destination_table, db=destination_schema, quoted=True),
        columns=[exp.to_identifier(c, quoted=True) for c in targets],
    )
    return insert.sql(dialect="duckdb", identify=True)


def move(
    conn: duckdb.DuckDBPyConnection,
    destination_schema: str,
    destination_table: str,
    staging_schema: str,
    staging_table: str,
    columns: Sequence[str],
    target_columns: Optional[Sequence[str]] = None,
) -> int:
    """
    Append every staging row into the destination for the given projection.

    Must only run once schema reconciliation has finished.

    Returns:
        Number of rows inserted

    Raises:
        MoveError: If the copy fails (the destination may be partially written)
    """
    destination = f"{destination_schema}.{destination_table}"
    staging = f"{staging_schema}.{staging_table}"
    sql = build_insert_sql(
        destination_schema,
        destination_table,
        staging_schema,
        staging_table,
        columns,
        target_columns,
    )

    try:
        row = conn.execute(sql).fetchone()
    except duckdb.Error as e:
        raise MoveError(destination, staging, e) from e

    rows = int(row[0]) if row else 0
    logger.info("Moved %d rows from %s into %s (%d columns)", rows, staging, destination, len(columns))
    return rows
