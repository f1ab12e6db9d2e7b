"""Schema-changing and data-moving operations used by the Appender."""

from syncappend.operations.caster import ColumnTypecaster
from syncappend.operations.cleanup import drop_staging, staging_scope
from syncappend.operations.extender import add_column
from syncappend.operations.finalizer import FinalizationReport, Finalizer
from syncappend.operations.mover import build_insert_sql, move
from syncappend.operations.quota import QuotaChecker, QuotaGate, WarehouseQuotaChecker

__all__ = [
    "ColumnTypecaster",
    "drop_staging",
    "staging_scope",
    "add_column",
    "FinalizationReport",
    "Finalizer",
    "build_insert_sql",
    "move",
    "QuotaChecker",
    "QuotaGate",
    "WarehouseQuotaChecker",
]
