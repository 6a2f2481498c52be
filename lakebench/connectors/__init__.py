"""
Table store connectors.

Backends are imported lazily so that only the selected engine's client
library has to be installed.
"""

from lakebench.config import Settings
from lakebench.connectors.base import KEY_COLUMN, RowSet, TableStore


def create_store(cfg: Settings) -> TableStore:
    """Connect to the table store selected by STORE_BACKEND."""
    if cfg.STORE_BACKEND == "snowflake":
        from lakebench.connectors.snowflake_store import SnowflakeTableStore

        return SnowflakeTableStore.connect(cfg)

    from lakebench.connectors.spark_store import SparkTableStore

    return SparkTableStore.connect(cfg)


__all__ = ["KEY_COLUMN", "RowSet", "TableStore", "create_store"]
