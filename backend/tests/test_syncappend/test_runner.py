"""Tests for the query-backed import runner."""

from syncappend.errors import UNKNOWN_ERROR_CODE
from syncappend.runner import QueryRunner


def test_materializes_each_source(conn, table_exists):
    runner = QueryRunner(
        conn,
        {
            "sync_a": "SELECT 'Carol' AS name, 12.5 AS price",
            "sync_b": "SELECT 1 AS n",
        },
    )

    runner.run()

    assert runner.success()
    assert [r.table_name for r in runner.results()] == ["sync_a", "sync_b"]
    assert runner.results()[0].columns == {"name": "VARCHAR", "price": "DECIMAL(3,1)"}
    assert table_exists(conn, "sync_a", "staging")
    assert table_exists(conn, "sync_b", "staging")


def test_failed_source_yields_failed_result(conn):
    runner = QueryRunner(conn, {"good": "SELECT 1 AS n", "bad": "SELECT * FROM no_such_table"})

    runner.run()

    good, bad = runner.results()
    assert good.success
    assert not bad.success
    assert bad.error_code == UNKNOWN_ERROR_CODE
    assert not runner.success()


def test_tracker_sees_progress(conn):
    seen = []
    runner = QueryRunner(conn, {"ok": "SELECT 1 AS n", "bad": "SELECT nope"}, staging_schema="imports")

    runner.run(seen.append)

    assert seen == ["importing", "imported", "importing", "failed"]
    assert runner.results()[0].schema_name == "imports"


def test_no_sources_is_not_success(conn):
    runner = QueryRunner(conn, {})
    runner.run()
    assert runner.results() == []
    assert not runner.success()


def test_staging_schema_from_settings(conn, monkeypatch, table_exists):
    monkeypatch.setenv("SYNCAPPEND_SCHEMAS__STAGING", "landing")

    runner = QueryRunner(conn, {"sync_a": "SELECT 1 AS n"})
    runner.run()

    assert runner.staging_schema == "landing"
    assert runner.results()[0].schema_name == "landing"
    assert table_exists(conn, "sync_a", "landing")
