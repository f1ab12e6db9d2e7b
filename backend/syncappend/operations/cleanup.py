"""Staging table cleanup."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Sequence

import duckdb

from syncappend.core.result import StagingResult

logger = logging.getLogger(__name__)


def drop_staging(
    conn: duckdb.DuckDBPyConnection, results: Sequence[StagingResult]
) -> List[str]:
    """
    Drop the staging table of every result.

    Failures are logged and skipped; a leaked staging table never blocks the
    caller.

    Returns:
        Qualified names that were dropped
    """
    dropped: List[str] = []
    for result in results:
        name = result.qualified_table_name
        try:
            conn.execute(f"DROP TABLE IF EXISTS {name}")
        except duckdb.Error:
            logger.warning("Failed to drop staging table %s", name, exc_info=True)
            continue
        logger.info("Dropped staging table %s", name)
        dropped.append(name)
    return dropped


@contextmanager
def staging_scope(
    conn: duckdb.DuckDBPyConnection, results: Sequence[StagingResult]
) -> Iterator[List[str]]:
    """
    Hold staging results for the duration of a block and drop them on exit.

    The yielded list is filled with the dropped names once the block exits,
    whether it returned or raised.
    """
    dropped: List[str] = []
    try:
        yield dropped
    finally:
        dropped.extend(drop_staging(conn, results))
