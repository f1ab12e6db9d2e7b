"""Tests for schema snapshots."""

import duckdb
import pytest

from syncappend.core.schema import snapshot
from syncappend.errors import CatalogError


@pytest.fixture
def orders(conn: duckdb.DuckDBPyConnection) -> str:
    conn.execute("CREATE TABLE orders (id INTEGER, customer VARCHAR, amount DECIMAL(10,2))")
    return "orders"


class TestSnapshot:
    """Test snapshot()."""

    def test_columns_in_ordinal_order(self, conn, orders):
        snap = snapshot(conn, orders, "main")

        assert snap.names == ["id", "customer", "amount"]
        assert snap.types == {
            "id": "INTEGER",
            "customer": "VARCHAR",
            "amount": "DECIMAL(10,2)",
        }

    def test_logical_types_attached(self, conn, orders, catalog):
        snap = snapshot(conn, orders, "main", catalog)

        assert snap.get("id").logical_type == "number"
        assert snap.get("customer").logical_type == "string"
        assert snap.get("amount").logical_type == "number"

    def test_without_catalog_logical_types_are_empty(self, conn, orders):
        snap = snapshot(conn, orders, "main")
        assert all(column.logical_type is None for column in snap)

    def test_missing_table(self, conn):
        with pytest.raises(CatalogError) as exc_info:
            snapshot(conn, "nope", "main")
        assert "main.nope" in str(exc_info.value)

    def test_schema_scoped(self, conn, orders):
        conn.execute("CREATE SCHEMA staging")
        conn.execute("CREATE TABLE staging.orders (total DOUBLE)")

        assert snapshot(conn, orders, "staging").names == ["total"]
        assert snapshot(conn, orders, "main").names == ["id", "customer", "amount"]

    def test_always_rereads_catalog(self, conn, orders):
        before = snapshot(conn, orders, "main")
        conn.execute("ALTER TABLE orders ADD COLUMN note VARCHAR")
        after = snapshot(conn, orders, "main")

        assert "note" not in before
        assert "note" in after
        assert len(after) == len(before) + 1
