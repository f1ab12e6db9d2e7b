"""Appender - merges a freshly imported staging table into an existing table."""

from __future__ import annotations

import logging
from typing import Callable, List, NoReturn, Optional, Sequence

import duckdb

from syncappend.config import SyncAppendSettings, get_settings
from syncappend.core.classifier import ColumnClassification, classify
from syncappend.core.result import AppendResult, AppendState, StagingResult
from syncappend.core.schema import SchemaSnapshot, snapshot
from syncappend.core.types import TypeCatalog, default_catalog
from syncappend.errors import (
    QUOTA_EXCEEDED_CODE,
    UNKNOWN_ERROR_CODE,
    AppendError,
    CastError,
    CatalogError,
)
from syncappend.operations.caster import ColumnTypecaster
from syncappend.operations.cleanup import drop_staging, staging_scope
from syncappend.operations.extender import add_column
from syncappend.operations.finalizer import Finalizer
from syncappend.operations.mover import move
from syncappend.operations.quota import QuotaChecker, QuotaGate
from syncappend.reporting import ErrorReporter
from syncappend.runner import Runner
from syncappend.storage.base import DestinationTable
from syncappend.storage.registry import MetadataRegistry

logger = logging.getLogger(__name__)

Tracker = Callable[[str], None]


class Appender:
    """
    Append orchestrator.

    Drives the import runner once, gates on storage quota, reconciles the
    staging schema with the destination (cast mismatched columns, add new
    ones), moves the rows, finalizes the destination, and always drops the
    staging tables.

    Outcomes:
    - success: ``AppendResult(success=True)``
    - quota exceeded: ``AppendResult(success=False, error_code=8001)``
    - import produced nothing usable: ``AppendResult(success=False)`` with the
      runner's error code
    - anything unexpected: ``AppendError`` raised, cause chained

    Example:
        >>> runner = QueryRunner(conn, {"sync_1": "SELECT * FROM read_csv('new.csv')"})
        >>> table = WarehouseTable(conn, "places", catalog=catalog)
        >>> result = Appender(runner, quota_checker, conn, table, catalog=catalog).run()
        >>> result.rows_appended
        120
    """

    def __init__(
        self,
        runner: Runner,
        quota_checker: QuotaChecker,
        conn: duckdb.DuckDBPyConnection,
        table: DestinationTable,
        *,
        catalog: Optional[TypeCatalog] = None,
        settings: Optional[SyncAppendSettings] = None,
        registry: Optional[MetadataRegistry] = None,
        reporter: Optional[ErrorReporter] = None,
    ) -> None:
        settings = settings or get_settings()

        self.runner = runner
        self.conn = conn
        self.table = table
        self.catalog = catalog or _catalog_from_settings(settings)
        self.reserved_columns: List[str] = list(settings.reserved_columns)

        self.quota_gate = QuotaGate(quota_checker)
        self.caster = ColumnTypecaster(conn, self.catalog)
        self.registry = registry or MetadataRegistry(
            conn, settings.schemas.metadata, settings.registry_table
        )
        self.finalizer = Finalizer(conn, self.registry, reporter)

        self.state = AppendState.IDLE
        self.result: Optional[AppendResult] = None
        self._tracker: Optional[Tracker] = None

    # ─────────────────────────────────────────────────
    # Entry point
    # ─────────────────────────────────────────────────

    def run(self, tracker: Optional[Tracker] = None) -> AppendResult:
        """
        Run the import and append its first successful result.

        Args:
            tracker: Optional callback receiving state names as they change

        Returns:
            AppendResult

        Raises:
            AppendError: On any unexpected failure; staging is dropped first
        """
        self._tracker = tracker
        self._transition(AppendState.RUNNING)

        try:
            self.runner.run(tracker)
            results = list(self.runner.results())
        except Exception as e:
            drop_staging(self.conn, self._results_after_failed_run())
            self._fail(e)

        try:
            with staging_scope(self.conn, results) as dropped:
                result = self._process(results)
        except Exception as e:
            self._fail(e)

        result.dropped_tables = list(dropped)
        self.result = result
        self._transition(AppendState.DONE)
        logger.info("Append into %s finished: %r", self._table_label, result)
        return result

    def success(self) -> bool:
        return self.result is not None and self.result.success

    def error_code(self) -> Optional[int]:
        return self.result.error_code if self.result else None

    # ─────────────────────────────────────────────────
    # Stages
    # ─────────────────────────────────────────────────

    def _process(self, results: Sequence[StagingResult]) -> AppendResult:
        if self.quota_gate.over_quota():
            self._transition(AppendState.QUOTA_EXCEEDED)
            return AppendResult(
                table_name=self.table.name,
                success=False,
                state=AppendState.QUOTA_EXCEEDED,
                error_code=QUOTA_EXCEEDED_CODE,
            )

        staging = next((r for r in results if r.is_success()), None)
        if staging is None:
            error_code = next(
                (r.error_code for r in results if r.error_code is not None),
                UNKNOWN_ERROR_CODE,
            )
            logger.warning("Import into %s produced no usable staging table", self._table_label)
            return AppendResult(
                table_name=self.table.name,
                success=False,
                error_code=error_code,
            )

        return self.append(staging)

    def append(self, staging: StagingResult) -> AppendResult:
        """
        Merge one staging table into the destination.

        Stages run strictly in order; the staging table is not dropped here.
        """
        self._transition(AppendState.RECONCILING)
        destination = snapshot(self.conn, self.table.name, self.table.schema_name, self.catalog)
        source = snapshot(self.conn, staging.table_name, staging.schema_name, self.catalog)
        if staging.columns and staging.columns != source.types:
            logger.warning(
                "Staging table %s changed since import: reported %s, found %s",
                staging,
                staging.columns,
                source.types,
            )
        classification = classify(destination.types, source.types, self.reserved_columns)
        logger.info("Reconciled %s with %s: %r", staging, self._table_label, classification)

        self._transition(AppendState.CASTING)
        for column in classification.mismatched:
            target = classification.target_for(column)
            self.caster.cast(
                staging.schema_name,
                staging.table_name,
                column,
                self._logical_type(destination, target),
                physical_type=destination.types[target],
            )
        if classification.mismatched:
            self._verify_casts(destination, staging)

        self._transition(AppendState.EXTENDING)
        for column in classification.unmatched:
            add_column(self.table, column, self._logical_type(source, column))

        self._transition(AppendState.MOVING)
        rows = self._move(staging, classification)

        self._transition(AppendState.FINALIZING)
        report = self.finalizer.run(self.table, f"{staging.schema_name}.{staging.table_name}")

        return AppendResult(
            table_name=self.table.name,
            success=True,
            staging_table=f"{staging.schema_name}.{staging.table_name}",
            rows_appended=rows,
            cast_columns=list(classification.mismatched),
            added_columns=list(classification.unmatched),
            finalization_errors=[str(e) for e in report.errors],
        )

    def _verify_casts(self, destination: SchemaSnapshot, staging: StagingResult) -> None:
        source = snapshot(self.conn, staging.table_name, staging.schema_name, self.catalog)
        recheck = classify(destination.types, source.types, self.reserved_columns)
        if recheck.mismatched:
            column = recheck.mismatched[0]
            raise CastError(
                f"{staging.schema_name}.{staging.table_name}",
                column,
                destination.types[recheck.target_for(column)],
                f"type is still {source.types[column]} after casting",
            )

    def _move(self, staging: StagingResult, classification: ColumnClassification) -> int:
        if not classification.projection:
            raise CatalogError(
                f"{staging.schema_name}.{staging.table_name}", "no importable columns"
            )
        return move(
            self.conn,
            self.table.schema_name,
            self.table.name,
            staging.schema_name,
            staging.table_name,
            classification.projection,
            classification.targets,
        )

    # ─────────────────────────────────────────────────
    # Private Methods
    # ─────────────────────────────────────────────────

    def _logical_type(self, schema: SchemaSnapshot, column_name: str) -> str:
        column = schema.get(column_name)
        if column is None or column.logical_type is None:
            physical = column.physical_type if column else "missing"
            raise CatalogError(
                f"{schema.schema_name}.{schema.table_name}",
                f"column '{column_name}' has unsupported type {physical}",
            )
        return column.logical_type

    def _results_after_failed_run(self) -> List[StagingResult]:
        try:
            return list(self.runner.results())
        except Exception:
            logger.warning("Runner results unavailable after failed run", exc_info=True)
            return []

    def _fail(self, cause: Exception) -> NoReturn:
        logger.error(
            "Append into %s failed in state %s",
            self._table_label,
            self.state.value,
            exc_info=cause,
        )
        self._transition(AppendState.DONE)
        self.result = AppendResult(table_name=self.table.name, success=False)
        raise AppendError(self.table.name, cause) from cause

    def _transition(self, state: AppendState) -> None:
        logger.debug("Append into %s: %s -> %s", self._table_label, self.state.value, state.value)
        self.state = state
        if self._tracker:
            self._tracker(state.value)

    @property
    def _table_label(self) -> str:
        return f"{self.table.schema_name}.{self.table.name}"


def _catalog_from_settings(settings: SyncAppendSettings) -> TypeCatalog:
    if settings.type_catalog_path:
        return TypeCatalog.from_yaml(settings.type_catalog_path)
    return default_catalog()
