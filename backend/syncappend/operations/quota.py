"""Storage quota gating."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import duckdb

from syncappend.config import SyncAppendSettings, get_settings

logger = logging.getLogger(__name__)


class QuotaChecker(Protocol):
    """Reports whether the account is already over its storage quota."""

    def over_storage_quota(self) -> bool: ...


class WarehouseQuotaChecker:
    """Compares the warehouse's used storage against a fixed byte quota."""

    def __init__(self, conn: duckdb.DuckDBPyConnection, quota_bytes: Optional[int]) -> None:
        self.conn = conn
        self.quota_bytes = quota_bytes

    @classmethod
    def from_settings(
        cls,
        conn: duckdb.DuckDBPyConnection,
        settings: Optional[SyncAppendSettings] = None,
    ) -> WarehouseQuotaChecker:
        """Build a checker enforcing ``storage_quota_bytes``."""
        settings = settings or get_settings()
        return cls(conn, settings.storage_quota_bytes)

    def used_bytes(self) -> int:
        row = self.conn.execute(
            """
            SELECT used_blocks * block_size
            FROM pragma_database_size()
            WHERE database_name = current_database()
            """
        ).fetchone()
        return int(row[0]) if row and row[0] is not None else 0

    def over_storage_quota(self) -> bool:
        if self.quota_bytes is None:
            return False
        return self.used_bytes() > self.quota_bytes


class QuotaGate:
    """Pre-flight check run once per append, before anything is mutated."""

    def __init__(self, checker: QuotaChecker) -> None:
        self.checker = checker

    def over_quota(self) -> bool:
        over = bool(self.checker.over_storage_quota())
        if over:
            logger.warning("Storage quota exceeded, append will be aborted")
        return over
