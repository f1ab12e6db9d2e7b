"""Tests for in-place column casting on staging tables."""

from datetime import date, datetime

import duckdb
import pytest

from syncappend.config import DEFAULT_RESERVED_COLUMNS
from syncappend.core.classifier import classify
from syncappend.core.schema import snapshot
from syncappend.errors import CastError, CatalogError
from syncappend.operations.caster import ColumnTypecaster


@pytest.fixture
def caster(conn: duckdb.DuckDBPyConnection, catalog) -> ColumnTypecaster:
    conn.execute("CREATE SCHEMA staging")
    return ColumnTypecaster(conn, catalog)


def _values(conn, column: str, table: str = "staging.people"):
    return [row[0] for row in conn.execute(f"SELECT {column} FROM {table} ORDER BY rowid").fetchall()]


class TestNumberCasts:
    """Casting to numeric types."""

    def test_text_to_double(self, conn, caster, column_types):
        conn.execute("CREATE TABLE staging.people AS SELECT * FROM (VALUES ('30'), ('41.5'), (NULL)) t(age)")

        new_type = caster.cast("staging", "people", "age", "number", physical_type="DOUBLE")

        assert new_type == "DOUBLE"
        assert column_types(conn, "people", "staging")["age"] == "DOUBLE"
        assert _values(conn, "age") == [30.0, 41.5, None]

    def test_defaults_to_canonical_type(self, conn, caster, column_types):
        conn.execute("CREATE TABLE staging.people AS SELECT '7' AS age")

        caster.cast("staging", "people", "age", "number")

        assert column_types(conn, "people", "staging")["age"] == "DOUBLE"

    def test_unparseable_text_is_refused(self, conn, caster, column_types):
        conn.execute("CREATE TABLE staging.people AS SELECT * FROM (VALUES ('30'), ('abc')) t(age)")

        with pytest.raises(CastError) as exc_info:
            caster.cast("staging", "people", "age", "number", physical_type="DOUBLE")

        assert exc_info.value.column_name == "age"
        assert column_types(conn, "people", "staging")["age"] == "VARCHAR"
        assert _values(conn, "age") == ["30", "abc"]

    def test_numeric_narrowing_is_refused(self, conn, caster):
        conn.execute("CREATE TABLE staging.people AS SELECT 2.5::DOUBLE AS age")

        with pytest.raises(CastError):
            caster.cast("staging", "people", "age", "number", physical_type="BIGINT")

    def test_exact_numeric_narrowing_allowed(self, conn, caster, column_types):
        conn.execute("CREATE TABLE staging.people AS SELECT 2.0::DOUBLE AS age")

        caster.cast("staging", "people", "age", "number", physical_type="BIGINT")

        assert column_types(conn, "people", "staging")["age"] == "BIGINT"
        assert _values(conn, "age") == [2]


class TestOtherCasts:
    """Casting to boolean, string and date."""

    def test_text_to_boolean(self, conn, caster):
        conn.execute(
            "CREATE TABLE staging.people AS SELECT * FROM (VALUES ('yes'), ('no'), ('TRUE'), (NULL)) t(active)"
        )

        caster.cast("staging", "people", "active", "boolean")

        assert _values(conn, "active") == [True, False, True, None]

    def test_unknown_boolean_literal_is_refused(self, conn, caster):
        conn.execute("CREATE TABLE staging.people AS SELECT 'maybe' AS active")

        with pytest.raises(CastError):
            caster.cast("staging", "people", "active", "boolean")

    def test_number_to_string(self, conn, caster, column_types):
        conn.execute("CREATE TABLE staging.people AS SELECT 42::INTEGER AS code")

        caster.cast("staging", "people", "code", "string")

        assert column_types(conn, "people", "staging")["code"] == "VARCHAR"
        assert _values(conn, "code") == ["42"]

    def test_text_to_timestamp(self, conn, caster, column_types):
        conn.execute("CREATE TABLE staging.people AS SELECT '2024-01-02 10:00:00+00' AS seen")

        caster.cast("staging", "people", "seen", "date")

        assert column_types(conn, "people", "staging")["seen"] == "TIMESTAMP WITH TIME ZONE"

    def test_dropping_time_of_day_is_refused(self, conn, caster, column_types):
        conn.execute("CREATE TABLE staging.people AS SELECT TIMESTAMP '2024-01-02 13:45:00' AS seen")

        with pytest.raises(CastError):
            caster.cast("staging", "people", "seen", "date", physical_type="DATE")

        assert column_types(conn, "people", "staging")["seen"] == "TIMESTAMP"
        assert _values(conn, "seen") == [datetime(2024, 1, 2, 13, 45)]

    def test_midnight_timestamp_to_date_allowed(self, conn, caster, column_types):
        conn.execute("CREATE TABLE staging.people AS SELECT TIMESTAMP '2024-01-02 00:00:00' AS seen")

        caster.cast("staging", "people", "seen", "date", physical_type="DATE")

        assert column_types(conn, "people", "staging")["seen"] == "DATE"
        assert _values(conn, "seen") == [date(2024, 1, 2)]

    def test_missing_column(self, conn, caster):
        conn.execute("CREATE TABLE staging.people AS SELECT 1 AS age")

        with pytest.raises(CatalogError):
            caster.cast("staging", "people", "height", "number")


class TestCastConvergence:
    """After casting, classification reports no mismatch."""

    def test_text_age_matches_numeric_destination(self, conn, caster, catalog):
        conn.execute("CREATE TABLE people (age DOUBLE, name VARCHAR)")
        conn.execute("CREATE TABLE staging.people AS SELECT '52' AS age, 'Dee' AS name")

        destination = snapshot(conn, "people", "main").types
        before = classify(destination, snapshot(conn, "people", "staging").types, DEFAULT_RESERVED_COLUMNS)
        assert before.mismatched == ("age",)

        caster.cast("staging", "people", "age", "number", physical_type=destination["age"])

        after = classify(destination, snapshot(conn, "people", "staging").types, DEFAULT_RESERVED_COLUMNS)
        assert after.mismatched == ()
        assert after.matching == ("age", "name")
