"""
Tests for the statistics gateways

The PostgreSQL gateway's statistic queries are portable SQLAlchemy Core, so
they run here against an in-memory SQLite database; only the catalog lookup
(information_schema) is patched.
"""

from unittest.mock import MagicMock, patch

import pandas as pd
import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool

from relgraph.core.database import DatabaseManager
from relgraph.core.exceptions import GatewayConnectionError
from relgraph.discover.statistics_gateway import (
    INVALID_IDENTIFIER,
    QUERY_FAILED,
    ColumnInfo,
    DataFrameStatisticsGateway,
    PostgresStatisticsGateway,
    StatisticResult,
)


def catalog_rows(entity, *columns):
    return [
        {"table_name": entity, "column_name": name, "data_type": data_type, "udt_name": data_type}
        for name, data_type in columns
    ]


@pytest.fixture
def sqlite_database():
    """DatabaseManager over an in-memory SQLite database shared across connections."""
    engine = create_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    with engine.begin() as conn:
        conn.execute(text(
            'CREATE TABLE flight (airline_code TEXT, flight_number INTEGER, "group" TEXT)'
        ))
        conn.execute(text(
            "INSERT INTO flight VALUES ('AA', 1, 'x'), ('AA', 2, 'x'), ('BA', 1, 'y'), ('BA', NULL, 'y')"
        ))
        conn.execute(text("CREATE TABLE empty_table (a INTEGER, b INTEGER)"))
    database = DatabaseManager(engine=engine)
    yield database
    engine.dispose()


@pytest.fixture
def sqlite_gateway(sqlite_database):
    gateway = PostgresStatisticsGateway(database=sqlite_database)
    rows = (
        catalog_rows("flight", ("airline_code", "text"), ("flight_number", "integer"), ("group", "text"))
        + catalog_rows("empty_table", ("a", "integer"), ("b", "integer"))
        + catalog_rows("missing_table", ("a", "integer"), ("b", "integer"))
    )
    with patch.object(sqlite_database, "execute_query", return_value=rows):
        gateway.list_columns("main")
    return gateway


class TestStatisticResult:
    """Test the result type"""

    def test_success(self):
        result = StatisticResult.success(7)
        assert result.ok
        assert result.value_or(0) == 7

    def test_failure(self):
        result = StatisticResult.failure(QUERY_FAILED, "boom")
        assert not result.ok
        assert result.error.kind == QUERY_FAILED
        assert result.value_or(0) == 0


class TestPostgresStatisticsGateway:
    """Test SQL statistics over SQLAlchemy"""

    def test_catalog(self, sqlite_gateway):
        assert sqlite_gateway.schema == "main"
        assert sqlite_gateway._catalog["flight"] == ["airline_code", "flight_number", "group"]

    def test_distinct_count_ignores_nulls(self, sqlite_gateway):
        assert sqlite_gateway.distinct_count("flight", "airline_code").value == 2
        assert sqlite_gateway.distinct_count("flight", "flight_number").value == 2

    def test_reserved_word_column(self, sqlite_gateway):
        """Identifiers are quoted, not pasted into the query"""
        result = sqlite_gateway.distinct_count("flight", "group")
        assert result.ok
        assert result.value == 2

    def test_grouped_max(self, sqlite_gateway):
        assert sqlite_gateway.grouped_max_distinct("flight", "airline_code", "flight_number").value == 2
        assert sqlite_gateway.grouped_max_distinct("flight", "flight_number", "airline_code").value == 2
        assert sqlite_gateway.grouped_max_distinct("flight", "airline_code", "group").value == 1

    def test_empty_table_reads_zero(self, sqlite_gateway):
        result = sqlite_gateway.grouped_max_distinct("empty_table", "a", "b")
        assert result.ok
        assert result.value == 0

    def test_unknown_identifier_is_not_queried(self, sqlite_gateway):
        with patch.object(sqlite_gateway.database, "execute_scalar") as execute:
            result = sqlite_gateway.distinct_count("flight", "flight_number; DROP TABLE flight")
            other = sqlite_gateway.grouped_max_distinct("nope", "a", "b")
        execute.assert_not_called()
        assert result.error.kind == INVALID_IDENTIFIER
        assert other.error.kind == INVALID_IDENTIFIER

    def test_failed_query_is_a_result(self, sqlite_gateway):
        """A table listed in the catalog but gone from the database"""
        result = sqlite_gateway.distinct_count("missing_table", "a")
        assert not result.ok
        assert result.error.kind == QUERY_FAILED

    def test_primary_key_query_failure(self, sqlite_gateway):
        """SQLite has no information_schema, so the lookup fails recoverably"""
        result = sqlite_gateway.primary_key_columns("flight")
        assert result.error.kind == QUERY_FAILED

    def test_primary_key_columns(self, sqlite_gateway):
        rows = [{"column_name": "airline_code"}, {"column_name": "flight_number"}]
        with patch.object(sqlite_gateway.database, "execute_query", return_value=rows) as query:
            result = sqlite_gateway.primary_key_columns("flight")
        assert result.value == ["airline_code", "flight_number"]
        assert query.call_args[0][1] == {"schema": "main", "entity": "flight"}

    def test_catalog_failure_is_fatal(self, sqlite_database):
        gateway = PostgresStatisticsGateway(database=sqlite_database)
        error = OperationalError("SELECT", {}, Exception("server closed the connection"))
        with patch.object(sqlite_database, "execute_query", side_effect=error):
            with pytest.raises(GatewayConnectionError):
                gateway.list_columns("public")

    def test_connect_unreachable(self):
        database = DatabaseManager(engine=MagicMock())
        database.get_engine = MagicMock()
        database.get_engine.return_value.connect.side_effect = OperationalError(
            "SELECT 1", {}, Exception("could not connect to server")
        )
        gateway = PostgresStatisticsGateway(database=database)
        with pytest.raises(GatewayConnectionError):
            gateway.connect()


class TestDataFrameStatisticsGateway:
    """Test in-memory statistics"""

    def setup_method(self):
        frame = pd.DataFrame({
            "customer_id": [1, 1, 2, 2, 2, None],
            "order_id": [10, 11, 12, 13, 14, 15],
            "note": ["a", "b", "a", "a", "b", "c"],
        })
        self.gateway = DataFrameStatisticsGateway(
            {"orders": frame, "empty": pd.DataFrame({"a": [], "b": []})},
            primary_keys={"orders": ["order_id"]},
            declared_types={"orders": {"note": ("character varying", "varchar")}},
        )
        self.columns = self.gateway.list_columns("public")

    def test_catalog(self):
        assert [info.entity for info in self.columns] == ["empty"] * 2 + ["orders"] * 3
        note = self.columns[-1]
        assert note == ColumnInfo("orders", "note", "character varying", "varchar")
        order_id = self.columns[3]
        assert (order_id.data_type, order_id.udt_name) == ("integer", "int8")

    def test_float_with_nulls_is_numeric(self):
        customer_id = self.columns[2]
        assert customer_id.data_type == "numeric"

    def test_distinct_count(self):
        assert self.gateway.distinct_count("orders", "customer_id").value == 2
        assert self.gateway.distinct_count("orders", "order_id").value == 6

    def test_grouped_max(self):
        assert self.gateway.grouped_max_distinct("orders", "customer_id", "order_id").value == 3
        assert self.gateway.grouped_max_distinct("orders", "order_id", "customer_id").value == 1
        assert self.gateway.grouped_max_distinct("orders", "note", "customer_id").value == 2

    def test_empty_frame(self):
        assert self.gateway.grouped_max_distinct("empty", "a", "b").value == 0

    def test_primary_key(self):
        assert self.gateway.primary_key_columns("orders").value == ["order_id"]
        assert self.gateway.primary_key_columns("empty").value == []

    def test_invalid_identifier(self):
        assert self.gateway.distinct_count("orders", "nope").error.kind == INVALID_IDENTIFIER

    def test_from_csv_dir(self, tmp_path):
        (tmp_path / "country.csv").write_text("code,name\nDE,Germany\nFR,France\n")
        gateway = DataFrameStatisticsGateway.from_csv_dir(tmp_path, primary_keys={"country": ["code"]})
        columns = gateway.list_columns("csv")
        assert [(info.entity, info.column) for info in columns] == [("country", "code"), ("country", "name")]
        assert gateway.distinct_count("country", "name").value == 2

    def test_missing_csv_dir(self, tmp_path):
        with pytest.raises(GatewayConnectionError):
            DataFrameStatisticsGateway.from_csv_dir(tmp_path / "nowhere")

    def test_unreadable_csv_is_skipped(self, tmp_path):
        """One file pandas cannot parse does not hide the others"""
        (tmp_path / "good.csv").write_text("a,b\n1,2\n")
        (tmp_path / "blank.csv").write_text("")
        gateway = DataFrameStatisticsGateway.from_csv_dir(tmp_path)
        columns = gateway.list_columns("csv")
        assert {info.entity for info in columns} == {"good"}
        assert gateway.distinct_count("good", "a").value == 1

    def test_no_readable_csv(self, tmp_path):
        (tmp_path / "blank.csv").write_text("")
        with pytest.raises(GatewayConnectionError):
            DataFrameStatisticsGateway.from_csv_dir(tmp_path)
