"""Destination schema extension."""

from __future__ import annotations

import logging

import duckdb

from syncappend.errors import CatalogError
from syncappend.storage.base import DestinationTable

logger = logging.getLogger(__name__)


def add_column(table: DestinationTable, name: str, logical_type: str) -> None:
    """
    Add a new column to the destination table.

    Existing rows get NULL. Called at most once per unmatched column per
    append; callers are responsible for not re-adding an existing name.

    Raises:
        CatalogError: If the column cannot be added
    """
    try:
        table.add_column(name, logical_type)
    except CatalogError:
        raise
    except duckdb.Error as e:
        raise CatalogError(f"{table.schema_name}.{table.name}", str(e)) from e
    logger.debug("Extended %s.%s with %s (%s)", table.schema_name, table.name, name, logical_type)
