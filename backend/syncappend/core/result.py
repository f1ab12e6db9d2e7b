"""Staging and append result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from syncappend.config import get_settings
from syncappend.errors import QUOTA_EXCEEDED_CODE, AppendError, QuotaExceededError
from syncappend.sql import qualify


class AppendState(Enum):
    """Orchestrator states of a single append."""

    IDLE = "idle"
    RUNNING = "running"  # Import runner executing
    QUOTA_EXCEEDED = "quota_exceeded"  # Terminal, staging dropped
    RECONCILING = "reconciling"  # Snapshot + classify
    CASTING = "casting"
    EXTENDING = "extending"
    MOVING = "moving"
    FINALIZING = "finalizing"
    DONE = "done"


@dataclass
class StagingResult:
    """
    Outcome of one import run, as reported by the runner.

    The append engine consumes it and drops the underlying staging table.
    """

    table_name: str
    schema_name: str = field(default_factory=lambda: get_settings().schemas.staging)
    success: bool = True
    error_code: Optional[int] = None

    # Column name -> physical type, as reported by the import step
    columns: Dict[str, str] = field(default_factory=dict)

    @property
    def qualified_table_name(self) -> str:
        return qualify(self.schema_name, self.table_name)

    def is_success(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        status = "success" if self.success else f"failed:{self.error_code}"
        return f"StagingResult({self.schema_name}.{self.table_name}, {status})"


@dataclass
class AppendResult:
    """
    Complete result of one append.

    Callers only need ``success`` and ``error_code``; the remaining fields are
    diagnostics.
    """

    table_name: str
    success: bool
    state: AppendState = AppendState.DONE
    error_code: Optional[int] = None
    staging_table: Optional[str] = None

    rows_appended: int = 0
    cast_columns: List[str] = field(default_factory=list)
    added_columns: List[str] = field(default_factory=list)
    finalization_errors: List[str] = field(default_factory=list)
    dropped_tables: List[str] = field(default_factory=list)

    @property
    def quota_exceeded(self) -> bool:
        return self.error_code == QUOTA_EXCEEDED_CODE

    def raise_for_error(self) -> None:
        """Raise the public error matching a failed result; no-op on success."""
        if self.success:
            return
        if self.quota_exceeded:
            raise QuotaExceededError(self.table_name)
        raise AppendError(self.table_name)

    def summary(self) -> str:
        """Generate human-readable summary."""
        status = "SUCCESS" if self.success else "FAILED"
        lines = [
            f"Append Result: {status}",
            f"  Destination: {self.table_name}",
            f"  Staging: {self.staging_table or '-'}",
            f"  Rows appended: {self.rows_appended}",
        ]
        if self.cast_columns:
            lines.append(f"  Cast columns: {', '.join(self.cast_columns)}")
        if self.added_columns:
            lines.append(f"  Added columns: {', '.join(self.added_columns)}")
        if self.error_code is not None:
            lines.append(f"  Error code: {self.error_code}")
        for error in self.finalization_errors:
            lines.append(f"  Finalization: {error}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        status = "success" if self.success else "failed"
        return f"AppendResult({self.table_name}, {status}, {self.rows_appended} rows)"
