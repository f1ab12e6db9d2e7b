"""Core syncappend models: type catalog, schema snapshots, classification, results."""

from syncappend.core.types import TypeCatalog, default_catalog, normalize_type
from syncappend.core.schema import ColumnMetadata, SchemaSnapshot, snapshot
from syncappend.core.classifier import ColumnClassification, classify
from syncappend.core.result import AppendResult, AppendState, StagingResult

__all__ = [
    "TypeCatalog",
    "default_catalog",
    "normalize_type",
    "ColumnMetadata",
    "SchemaSnapshot",
    "snapshot",
    "ColumnClassification",
    "classify",
    "AppendResult",
    "AppendState",
    "StagingResult",
]
