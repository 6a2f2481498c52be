"""
Spark Table Store

Runs adapter statements through a PySpark session configured for an
Iceberg (Hive metastore + S3FileIO) or Delta Lake warehouse.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql import functions as F

from lakebench.config import Settings
from lakebench.connectors.base import KEY_COLUMN, RowSet, TableStore
from lakebench.errors import StoreError
from lakebench.models import TableIdentifier

logger = logging.getLogger(__name__)

# Session options shared by both lakehouse formats.
_COMMON_CONF: Dict[str, str] = {
    "spark.sql.catalogImplementation": "hive",
    "spark.sql.defaultCatalog": "spark_catalog",
    "spark.driver.bindAddress": "localhost",
    "spark.memory.offHeap.enabled": "true",
    "spark.memory.offHeap.size": "16g",
    "spark.files.useFetchCache": "false",
    "spark.sql.catalog.spark_catalog.cache-enabled": "false",
    "spark.sql.catalog.spark_catalog.cache.expiration-interval-ms": "0",
}


def build_session_conf(cfg: Settings) -> Dict[str, str]:
    """Return the SparkSession options for the configured lakehouse format."""
    conf = dict(_COMMON_CONF)
    conf["hive.metastore.uris"] = cfg.SPARK_METASTORE_URL
    conf["spark.driver.memory"] = cfg.SPARK_DRIVER_MEMORY
    conf["spark.executor.memory"] = cfg.SPARK_EXECUTOR_MEMORY

    if cfg.SPARK_LAKEHOUSE == "iceberg":
        conf.update(
            {
                "spark.sql.extensions": "org.apache.iceberg.spark.extensions.IcebergSparkSessionExtensions",
                "spark.sql.catalog.spark_catalog": "org.apache.iceberg.spark.SparkCatalog",
                "spark.sql.catalog.spark_catalog.type": "hive",
                "spark.sql.catalog.spark_catalog.uri": cfg.SPARK_METASTORE_URL,
                "spark.sql.catalog.spark_catalog.io-impl": "org.apache.iceberg.aws.s3.S3FileIO",
                "spark.sql.catalog.spark_catalog.warehouse": cfg.SPARK_WAREHOUSE_DIR,
                "spark.sql.catalog.spark_catalog.s3.endpoint": cfg.OBJECT_STORE_URI,
                "spark.executorEnv.SPARK_PUBLIC_DNS": "localhost",
                "spark.executorEnv.SPARK_LOCAL_IP": "localhost",
            }
        )
    else:
        conf.update(
            {
                "spark.sql.extensions": "io.delta.sql.DeltaSparkSessionExtension",
                "spark.sql.catalog.spark_catalog": "org.apache.spark.sql.delta.catalog.DeltaCatalog",
                "spark.sql.catalog.spark_catalog.warehouse": cfg.SPARK_WAREHOUSE_DIR,
                "spark.sql.warehouse.dir": cfg.SPARK_WAREHOUSE_DIR,
                "spark.hadoop.fs.s3a.endpoint": cfg.OBJECT_STORE_URI,
                "spark.hadoop.fs.s3a.access.key": cfg.OBJECT_STORE_USER,
                "spark.hadoop.fs.s3a.secret.key": cfg.OBJECT_STORE_PASSWORD,
                "spark.databricks.delta.retentionDurationCheck.enabled": "false",
                "spark.databricks.io.cache.enabled": "false",
            }
        )
    return conf


class SparkRowSet(RowSet):
    """Row set backed by a lazily evaluated DataFrame."""

    def __init__(self, frame: DataFrame) -> None:
        self._frame = frame

    def where_key_equals(self, key: str) -> SparkRowSet:
        return SparkRowSet(self._frame.where(F.col(KEY_COLUMN) == key))

    def where_key_at_least(self, key: str) -> SparkRowSet:
        # Ordered so a following limit keeps the lowest keys.
        frame = self._frame.where(F.col(KEY_COLUMN) >= key)
        return SparkRowSet(frame.orderBy(KEY_COLUMN))

    def select(self, columns: Sequence[str]) -> SparkRowSet:
        return SparkRowSet(self._frame.select(*columns))

    def limit(self, count: int) -> SparkRowSet:
        return SparkRowSet(self._frame.limit(int(count)))

    def collect(self) -> list[dict[str, Any]]:
        return [row.asDict() for row in self._frame.collect()]


class SparkTableStore(TableStore):
    """Table store over a shared SparkSession."""

    def __init__(self, session: SparkSession) -> None:
        self.session = session

    @classmethod
    def connect(cls, cfg: Settings) -> SparkTableStore:
        """Create (or reuse) the SparkSession described by the settings."""
        logger.info(
            "Connecting to %s using %s", cfg.SPARK_URL, cfg.SPARK_LAKEHOUSE
        )
        try:
            builder = (
                SparkSession.builder.appName(cfg.SPARK_APP_NAME)
                .master(cfg.SPARK_URL)
                .enableHiveSupport()
            )
            for key, value in build_session_conf(cfg).items():
                builder = builder.config(key, value)
            session = builder.getOrCreate()
        except Exception as e:
            raise StoreError(
                f"Could not create SparkSession: {e}", category="SESSION"
            ) from e

        logger.info("Spark master at %s", session.sparkContext.master)
        return cls(session)

    def execute_statement(
        self, statement: str, params: Optional[Sequence[Any]] = None
    ) -> list[dict[str, Any]]:
        if params:
            frame = self.session.sql(statement, args=list(params))
        else:
            frame = self.session.sql(statement)
        return [row.asDict() for row in frame.collect()]

    def query_table(self, table: TableIdentifier) -> SparkRowSet:
        return SparkRowSet(self.session.table(table.qualified))

    def close(self) -> None:
        self.session.stop()
        logger.info("SparkSession stopped")
