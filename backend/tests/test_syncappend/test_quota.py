"""Tests for storage quota gating."""

from syncappend.config import SyncAppendSettings
from syncappend.operations.quota import QuotaGate, WarehouseQuotaChecker


class CountingChecker:
    def __init__(self, over: bool) -> None:
        self.over = over
        self.calls = 0

    def over_storage_quota(self) -> bool:
        self.calls += 1
        return self.over


class TestWarehouseQuotaChecker:
    """Test the DuckDB storage-size checker."""

    def test_unlimited_quota(self, conn, places):
        assert WarehouseQuotaChecker(conn, None).over_storage_quota() is False

    def test_zero_quota_is_exceeded(self, conn, places):
        conn.execute("CHECKPOINT")

        checker = WarehouseQuotaChecker(conn, 0)

        assert checker.used_bytes() > 0
        assert checker.over_storage_quota() is True

    def test_large_quota(self, conn, places):
        conn.execute("CHECKPOINT")
        assert WarehouseQuotaChecker(conn, 10 * 1024**4).over_storage_quota() is False


class TestQuotaGate:
    """Test QuotaGate."""

    def test_consults_checker_once(self):
        checker = CountingChecker(over=False)

        assert QuotaGate(checker).over_quota() is False
        assert checker.calls == 1

    def test_logs_when_over(self, caplog):
        assert QuotaGate(CountingChecker(over=True)).over_quota() is True
        assert "Storage quota exceeded" in caplog.text


class TestFromSettings:
    """Test building the checker from settings."""

    def test_uses_configured_quota(self, conn, places):
        conn.execute("CHECKPOINT")
        settings = SyncAppendSettings(storage_quota_bytes=0)

        checker = WarehouseQuotaChecker.from_settings(conn, settings)

        assert checker.quota_bytes == 0
        assert checker.over_storage_quota() is True

    def test_reads_env_by_default(self, conn, monkeypatch):
        monkeypatch.setenv("SYNCAPPEND_STORAGE_QUOTA_BYTES", "4096")
        assert WarehouseQuotaChecker.from_settings(conn).quota_bytes == 4096
