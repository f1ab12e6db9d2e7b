"""Import runners that materialize staging tables."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Sequence

import duckdb

from syncappend.config import get_settings
from syncappend.core.result import StagingResult
from syncappend.errors import UNKNOWN_ERROR_CODE
from syncappend.sql import qualify, quote_identifier

logger = logging.getLogger(__name__)

Tracker = Callable[[str], None]


class Runner(Protocol):
    """Anything that runs an import and reports its staging results."""

    def run(self, tracker: Optional[Tracker] = None) -> None: ...

    def success(self) -> bool: ...

    def results(self) -> Sequence[StagingResult]: ...


class QueryRunner:
    """
    Materializes one staging table per named SELECT statement.

    A source that fails to materialize yields an unsuccessful StagingResult
    rather than an exception, so the caller can still clean up the others.
    The staging schema defaults to ``schemas.staging`` from the settings.

    Example:
        >>> runner = QueryRunner(conn, {"sync_20240101": "SELECT * FROM read_csv('a.csv')"})
        >>> runner.run()
        >>> runner.results()
        [StagingResult(staging.sync_20240101, success)]
    """

    def __init__(
        self,
        conn: duckdb.DuckDBPyConnection,
        sources: Mapping[str, str],
        staging_schema: Optional[str] = None,
    ) -> None:
        self.conn = conn
        self.sources: Dict[str, str] = dict(sources)
        self.staging_schema = staging_schema or get_settings().schemas.staging
        self._results: List[StagingResult] = []

    def run(self, tracker: Optional[Tracker] = None) -> None:
        self._results = []
        self.conn.execute(f"CREATE SCHEMA IF NOT EXISTS {quote_identifier(self.staging_schema)}")

        for table_name, sql in self.sources.items():
            if tracker:
                tracker("importing")
            self._results.append(self._materialize(table_name, sql))
            if tracker:
                tracker("imported" if self._results[-1].is_success() else "failed")

    def _materialize(self, table_name: str, sql: str) -> StagingResult:
        target = qualify(self.staging_schema, table_name)
        try:
            self.conn.execute(f"CREATE OR REPLACE TABLE {target} AS {sql}")
            rows = self.conn.execute(
                """
                SELECT column_name, data_type
                FROM information_schema.columns
                WHERE table_schema = ? AND table_name = ?
                ORDER BY ordinal_position
                """,
                [self.staging_schema, table_name],
            ).fetchall()
        except duckdb.Error as e:
            logger.warning("Import into %s failed: %s", target, e)
            return StagingResult(
                table_name=table_name,
                schema_name=self.staging_schema,
                success=False,
                error_code=UNKNOWN_ERROR_CODE,
            )

        logger.info("Imported %s (%d columns)", target, len(rows))
        return StagingResult(
            table_name=table_name,
            schema_name=self.staging_schema,
            success=True,
            columns={str(name): str(data_type) for name, data_type in rows},
        )

    def success(self) -> bool:
        return bool(self._results) and all(r.is_success() for r in self._results)

    def results(self) -> List[StagingResult]:
        return list(self._results)
