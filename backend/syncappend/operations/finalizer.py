"""Post-append finalization of the destination table.

Runs once per successful append, after the rows have landed. Every step is
best-effort: a failure is reported and the remaining steps still run, with
cache invalidation always attempted last. Nothing here rolls back the move.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import duckdb

from syncappend.errors import FinalizationError
from syncappend.reporting import ErrorReporter, LoggingReporter
from syncappend.sql import qualify, quote_identifier
from syncappend.storage.base import DestinationTable
from syncappend.storage.registry import MetadataRegistry

logger = logging.getLogger(__name__)


@dataclass
class FinalizationReport:
    """Which finalization steps ran and which failed."""

    completed: List[str] = field(default_factory=list)
    errors: List[FinalizationError] = field(default_factory=list)

    @property
    def failed(self) -> List[str]:
        return [e.step for e in self.errors]

    @property
    def ok(self) -> bool:
        return not self.errors


class Finalizer:
    """
    Marks a freshly appended table as managed again.

    Step order:
    1. identity          - re-derive the table's physical id
    2. mark_imported     - record the staging table it was fed from
    3. reload            - force a schema reload
    4. derived_state     - geometry detection + statistics refresh
    5. registry          - upsert the metadata registry row
    6. touch_updated_at  - bump updated_at on the newest row
    7. invalidate_cache  - always last
    """

    def __init__(
        self,
        conn: duckdb.DuckDBPyConnection,
        registry: MetadataRegistry,
        reporter: Optional[ErrorReporter] = None,
        *,
        id_column: str = "cartodb_id",
        timestamp_column: str = "updated_at",
    ) -> None:
        self.conn = conn
        self.registry = registry
        self.reporter = reporter or LoggingReporter()
        self.id_column = id_column
        self.timestamp_column = timestamp_column

    def run(self, table: DestinationTable, staging_name: str) -> FinalizationReport:
        report = FinalizationReport()
        steps: List[Tuple[str, Callable[[], object]]] = [
            ("identity", table.refresh_identity),
            ("mark_imported", lambda: table.mark_imported(staging_name)),
            ("reload", table.reload),
            ("derived_state", table.refresh_derived_state),
            ("registry", lambda: self._upsert_registry(table)),
            ("touch_updated_at", lambda: self.touch_latest_row(table)),
            ("invalidate_cache", table.invalidate_cache),
        ]

        for name, step in steps:
            try:
                step()
            except Exception as e:
                error = FinalizationError(name, e)
                report.errors.append(error)
                logger.error(
                    "Finalization of %s.%s failed at %s",
                    table.schema_name,
                    table.name,
                    name,
                    exc_info=True,
                )
                self.reporter.report(
                    "Sync finalization error",
                    level="error",
                    table=f"{table.schema_name}.{table.name}",
                    step=name,
                    error=str(e),
                )
                continue
            report.completed.append(name)

        return report

    def _upsert_registry(self, table: DestinationTable) -> None:
        if table.table_id is None:
            raise ValueError("table has no identity to register")
        self.registry.upsert(str(table.table_id))

    def touch_latest_row(self, table: DestinationTable) -> None:
        """Set the timestamp column to now() on the row with the highest id."""
        target = qualify(table.schema_name, table.name)
        id_column = quote_identifier(self.id_column)
        self.conn.execute(
            f"""
            UPDATE {target}
            SET {quote_identifier(self.timestamp_column)} = now()
            WHERE {id_column} IN (SELECT MAX({id_column}) FROM {target})
            """
        )
