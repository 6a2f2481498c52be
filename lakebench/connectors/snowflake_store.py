"""
Snowflake Table Store

Runs adapter statements over a single shared Snowflake connection. The
connector is thread-safe at the connection level; each call opens its own
cursor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Sequence

import snowflake.connector
from snowflake.connector import DictCursor, SnowflakeConnection

from lakebench.config import Settings
from lakebench.connectors.base import KEY_COLUMN, RowSet, TableStore
from lakebench.errors import StoreError
from lakebench.models import TableIdentifier

logger = logging.getLogger(__name__)


def connection_params(cfg: Settings) -> Dict[str, Any]:
    """Get connection parameters for snowflake.connector."""
    params: Dict[str, Any] = {
        "account": cfg.SNOWFLAKE_ACCOUNT,
        "user": cfg.SNOWFLAKE_USER,
        # All statements use `?` placeholders.
        "paramstyle": "qmark",
        "login_timeout": cfg.SNOWFLAKE_CONNECT_LOGIN_TIMEOUT,
        "network_timeout": cfg.SNOWFLAKE_CONNECT_NETWORK_TIMEOUT,
        "socket_timeout": cfg.SNOWFLAKE_CONNECT_SOCKET_TIMEOUT,
        "session_parameters": {"QUERY_TAG": "lakebench"},
    }
    if cfg.SNOWFLAKE_PASSWORD:
        params["password"] = cfg.SNOWFLAKE_PASSWORD
    if cfg.SNOWFLAKE_WAREHOUSE:
        params["warehouse"] = cfg.SNOWFLAKE_WAREHOUSE
    if cfg.SNOWFLAKE_DATABASE:
        params["database"] = cfg.SNOWFLAKE_DATABASE
    if cfg.SNOWFLAKE_SCHEMA:
        params["schema"] = cfg.SNOWFLAKE_SCHEMA
    if cfg.SNOWFLAKE_ROLE:
        params["role"] = cfg.SNOWFLAKE_ROLE
    return params


@dataclass(frozen=True)
class SnowflakeRowSet(RowSet):
    """Row set that composes a parameterized SELECT."""

    store: "SnowflakeTableStore"
    table: TableIdentifier
    columns: tuple[str, ...] = ()
    predicate: Optional[str] = None
    key: Optional[str] = None
    row_limit: Optional[int] = None

    def where_key_equals(self, key: str) -> SnowflakeRowSet:
        return replace(self, predicate="=", key=key)

    def where_key_at_least(self, key: str) -> SnowflakeRowSet:
        return replace(self, predicate=">=", key=key)

    def select(self, columns: Sequence[str]) -> SnowflakeRowSet:
        return replace(self, columns=tuple(columns))

    def limit(self, count: int) -> SnowflakeRowSet:
        return replace(self, row_limit=int(count))

    def sql(self) -> tuple[str, list[Any]]:
        projection = ", ".join(self.columns) if self.columns else "*"
        query = f"SELECT {projection} FROM {self.table.qualified}"
        params: list[Any] = []
        if self.predicate is not None:
            query += f" WHERE {KEY_COLUMN} {self.predicate} ?"
            params.append(self.key)
        if self.predicate == ">=":
            query += f" ORDER BY {KEY_COLUMN}"
        if self.row_limit is not None:
            query += f" LIMIT {self.row_limit}"
        return query, params

    def collect(self) -> list[dict[str, Any]]:
        query, params = self.sql()
        return self.store.execute_statement(query, params)


class SnowflakeTableStore(TableStore):
    """Table store over one Snowflake connection."""

    def __init__(self, conn: SnowflakeConnection) -> None:
        self.conn = conn

    @classmethod
    def connect(cls, cfg: Settings) -> SnowflakeTableStore:
        logger.info(
            "Connecting to Snowflake: %s@%s", cfg.SNOWFLAKE_USER, cfg.SNOWFLAKE_ACCOUNT
        )
        try:
            conn = snowflake.connector.connect(**connection_params(cfg))
        except Exception as e:
            raise StoreError(
                f"Could not connect to Snowflake: {e}", category="SESSION"
            ) from e
        return cls(conn)

    def execute_statement(
        self, statement: str, params: Optional[Sequence[Any]] = None
    ) -> list[dict[str, Any]]:
        cursor = self.conn.cursor(DictCursor)
        try:
            if params is None:
                cursor.execute(statement)
            else:
                cursor.execute(statement, list(params))
            if cursor.description is None:
                return []
            return list(cursor.fetchall())
        finally:
            cursor.close()

    def query_table(self, table: TableIdentifier) -> SnowflakeRowSet:
        return SnowflakeRowSet(store=self, table=table)

    def close(self) -> None:
        self.conn.close()
        logger.info("Snowflake connection closed")
