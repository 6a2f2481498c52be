"""
Tests for the Spark table store. Session building and DataFrame calls are
mocked; pyspark itself must be importable.
"""

from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("pyspark")

from lakebench.config import Settings  # noqa: E402
from lakebench.connectors.spark_store import (  # noqa: E402
    SparkRowSet,
    SparkTableStore,
    build_session_conf,
)
from lakebench.errors import StoreError  # noqa: E402
from lakebench.models import TableIdentifier  # noqa: E402


class TestSessionConf:
    def test_iceberg(self):
        conf = build_session_conf(Settings(_env_file=None, SPARK_LAKEHOUSE="iceberg"))
        assert conf["spark.sql.catalog.spark_catalog"] == "org.apache.iceberg.spark.SparkCatalog"
        assert conf["spark.sql.catalog.spark_catalog.uri"] == "thrift://localhost:9083"
        assert conf["spark.sql.catalog.spark_catalog.io-impl"] == "org.apache.iceberg.aws.s3.S3FileIO"
        assert "spark.hadoop.fs.s3a.access.key" not in conf

    def test_delta(self):
        conf = build_session_conf(
            Settings(_env_file=None, SPARK_LAKEHOUSE="delta", OBJECT_STORE_USER="u")
        )
        assert conf["spark.sql.extensions"] == "io.delta.sql.DeltaSparkSessionExtension"
        assert conf["spark.hadoop.fs.s3a.access.key"] == "u"
        assert conf["spark.sql.catalog.spark_catalog.cache-enabled"] == "false"


class TestStore:
    def test_execute_statement_binds_positional_args(self):
        session = MagicMock()
        row = MagicMock()
        row.asDict.return_value = {"n": 1}
        session.sql.return_value.collect.return_value = [row]
        store = SparkTableStore(session)

        out = store.execute_statement("DELETE FROM t WHERE YCSB_KEY = ?", ("k",))

        session.sql.assert_called_once_with(
            "DELETE FROM t WHERE YCSB_KEY = ?", args=["k"]
        )
        assert out == [{"n": 1}]

    def test_query_table_uses_qualified_name(self):
        session = MagicMock()
        store = SparkTableStore(session)
        rows = store.query_table(TableIdentifier("spark_catalog.ycsb", "usertable"))

        assert isinstance(rows, SparkRowSet)
        session.table.assert_called_once_with("spark_catalog.ycsb.usertable")

    def test_row_set_limit_and_select(self):
        frame = MagicMock()
        rows = SparkRowSet(frame).select(["FIELD0"]).limit(5)
        frame.select.assert_called_once_with("FIELD0")
        frame.select.return_value.limit.assert_called_once_with(5)
        assert isinstance(rows, SparkRowSet)

    def test_range_filter_orders_by_key(self):
        frame = MagicMock()
        with patch("lakebench.connectors.spark_store.F") as functions:
            functions.col.return_value.__ge__.return_value = "predicate"
            rows = SparkRowSet(frame).where_key_at_least("user5").limit(3)

        functions.col.assert_called_once_with("YCSB_KEY")
        frame.where.assert_called_once_with("predicate")
        ordered = frame.where.return_value.orderBy
        ordered.assert_called_once_with("YCSB_KEY")
        ordered.return_value.limit.assert_called_once_with(3)
        assert isinstance(rows, SparkRowSet)

    def test_session_failure_is_store_error(self):
        with patch(
            "lakebench.connectors.spark_store.SparkSession"
        ) as session_cls:
            session_cls.builder.appName.side_effect = RuntimeError("no master")
            with pytest.raises(StoreError):
                SparkTableStore.connect(Settings(_env_file=None))

    def test_close_stops_session(self):
        session = MagicMock()
        SparkTableStore(session).close()
        session.stop.assert_called_once()
