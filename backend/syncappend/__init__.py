"""
syncappend: schema reconciliation and append engine for DuckDB warehouses

Merges a freshly imported staging table into an existing table:
- Classifies staging columns against the destination schema
- Casts type-mismatched staging columns to the destination's types
- Adds new columns to the destination
- Moves the rows, finalizes the destination, and always drops staging
"""

from syncappend.core.types import TypeCatalog, default_catalog
from syncappend.core.schema import ColumnMetadata, SchemaSnapshot, snapshot
from syncappend.core.classifier import ColumnClassification, classify
from syncappend.core.result import AppendResult, AppendState, StagingResult
from syncappend.core.appender import Appender
from syncappend.runner import QueryRunner, Runner
from syncappend.operations.quota import QuotaChecker, WarehouseQuotaChecker
from syncappend.storage.base import DestinationTable
from syncappend.storage.registry import MetadataRegistry
from syncappend.storage.warehouse_table import WarehouseTable
from syncappend.reporting import ErrorReporter, LoggingReporter
from syncappend.config import SyncAppendSettings, get_settings
from syncappend.errors import (
    QUOTA_EXCEEDED_CODE,
    UNKNOWN_ERROR_CODE,
    SyncAppendError,
    QuotaExceededError,
    CatalogError,
    CastError,
    MoveError,
    FinalizationError,
    AppendError,
)

__version__ = "0.1.0"

__all__ = [
    # Core models
    "TypeCatalog",
    "default_catalog",
    "ColumnMetadata",
    "SchemaSnapshot",
    "snapshot",
    "ColumnClassification",
    "classify",
    "AppendResult",
    "AppendState",
    "StagingResult",
    # Orchestration
    "Appender",
    "Runner",
    "QueryRunner",
    "QuotaChecker",
    "WarehouseQuotaChecker",
    # Storage
    "DestinationTable",
    "MetadataRegistry",
    "WarehouseTable",
    # Reporting & config
    "ErrorReporter",
    "LoggingReporter",
    "SyncAppendSettings",
    "get_settings",
    # Errors
    "QUOTA_EXCEEDED_CODE",
    "UNKNOWN_ERROR_CODE",
    "SyncAppendError",
    "QuotaExceededError",
    "CatalogError",
    "CastError",
    "MoveError",
    "FinalizationError",
    "AppendError",
]
