"""
Lakehouse Client

The CRUD entry points called by benchmark worker threads. One client (and
one table store session) is shared by every worker; each call builds its
statement, runs it through the retrying executor and reports a Status.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional

from lakebench.config import Settings
from lakebench.connectors import TableStore, create_store
from lakebench.core.field_mapper import FieldMapper
from lakebench.core.query_builder import QueryBuilder, Statement, TableQuery
from lakebench.core.report_writer import ReportWriter
from lakebench.core.retry import RetryingExecutor
from lakebench.core.sample_registry import RegistrySnapshot, SampleRegistry
from lakebench.errors import FieldMappingError
from lakebench.models import OperationKind, Status, TableIdentifier

logger = logging.getLogger(__name__)


class LakehouseClient:
    """
    Benchmark adapter over a SQL-queryable table store.

    Workers only ever see OK / NOT_FOUND / ERROR; individual failed attempts
    are absorbed by the executor and show up only in the final report.
    """

    def __init__(
        self,
        store: TableStore,
        namespace: str,
        *,
        registry: Optional[SampleRegistry] = None,
        executor: Optional[RetryingExecutor] = None,
        field_mapper: Optional[FieldMapper] = None,
        report_writer: Optional[ReportWriter] = None,
    ) -> None:
        self.store = store
        self.namespace = namespace
        self.registry = registry or SampleRegistry()
        self.executor = executor or RetryingExecutor(self.registry)
        self.field_mapper = field_mapper or FieldMapper()
        self.builder = QueryBuilder(self.field_mapper)
        self.report_writer = report_writer
        self._tables: Dict[str, TableIdentifier] = {}
        self._cleanup_lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_settings(cls, cfg: Settings) -> LakehouseClient:
        """Connect to the configured store and wire up the core."""
        store = create_store(cfg)
        registry = SampleRegistry()
        return cls(
            store,
            cfg.SPARK_NAMESPACE,
            registry=registry,
            executor=RetryingExecutor(registry, max_attempts=cfg.MAX_ATTEMPTS),
            field_mapper=FieldMapper(order=cfg.FIELD_ORDER),
            report_writer=ReportWriter(
                cfg.RESULT_FILE_PREFIX, parquet=cfg.REPORT_PARQUET
            ),
        )

    def table_id(self, table: str) -> TableIdentifier:
        ident = self._tables.get(table)
        if ident is None:
            ident = self._tables.setdefault(
                table, TableIdentifier(self.namespace, table)
            )
        return ident

    # -------------------------------------------------------------------------
    # CRUD entry points
    # -------------------------------------------------------------------------

    def read(
        self,
        table: str,
        key: str,
        fields: Optional[Iterable[str]],
        result: Dict[str, Any],
    ) -> Status:
        try:
            mapping = self.field_mapper.map_fields(fields)
        except FieldMappingError as e:
            logger.error("read %s: %s", key, e)
            return Status.ERROR

        query = self.builder.read(self.table_id(table), key, mapping)
        outcome = self._run_query(query)
        if outcome is None:
            return Status.ERROR
        if not outcome:
            return Status.NOT_FOUND

        result.update(self._project(outcome[0], mapping))
        return Status.OK

    def scan(
        self,
        table: str,
        start_key: str,
        record_count: int,
        fields: Optional[Iterable[str]],
        result: List[Dict[str, Any]],
    ) -> Status:
        try:
            mapping = self.field_mapper.map_fields(fields)
        except FieldMappingError as e:
            logger.error("scan from %s: %s", start_key, e)
            return Status.ERROR

        query = self.builder.scan(self.table_id(table), start_key, record_count, mapping)
        outcome = self._run_query(query)
        if outcome is None:
            return Status.ERROR
        if not outcome:
            return Status.NOT_FOUND

        result.extend(self._project(row, mapping) for row in outcome)
        return Status.OK

    def insert(self, table: str, key: str, values: Mapping[str, Any]) -> Status:
        try:
            statement = self.builder.insert(self.table_id(table), key, values)
        except FieldMappingError as e:
            logger.error("insert %s: %s", key, e)
            return Status.ERROR
        return self._run_statement(statement)

    def update(self, table: str, key: str, values: Mapping[str, Any]) -> Status:
        try:
            statement = self.builder.update(self.table_id(table), key, values)
        except FieldMappingError as e:
            logger.error("update %s: %s", key, e)
            return Status.ERROR
        return self._run_statement(statement)

    def delete(self, table: str, key: str) -> Status:
        statement = self.builder.delete(self.table_id(table), key)
        return self._run_statement(statement)

    # -------------------------------------------------------------------------
    # Shutdown
    # -------------------------------------------------------------------------

    def cleanup(self) -> Optional[RegistrySnapshot]:
        """
        Drain the registry, write the report and close the store.

        Only the first call does anything; later calls return None.
        """
        with self._cleanup_lock:
            if self._closed:
                return None
            self._closed = True

        snapshot = self.registry.drain_all()
        try:
            if self.report_writer is not None:
                self.report_writer.write(snapshot)
        finally:
            self.store.close()
        return snapshot

    # -------------------------------------------------------------------------
    # Internal methods
    # -------------------------------------------------------------------------

    def _run_statement(self, statement: Statement) -> Status:
        result = self.executor.execute(
            statement.kind,
            lambda: self.store.execute_statement(statement.text, statement.params),
        )
        if not result.succeeded:
            logger.warning("Giving up on statement: %s", statement.render())
            return Status.ERROR
        return Status.OK

    def _run_query(self, query: TableQuery) -> Optional[List[Dict[str, Any]]]:
        """Rows matched by the query, or None when every attempt failed."""
        result = self.executor.execute(query.kind, lambda: query.run(self.store))
        if not result.succeeded:
            logger.warning("Giving up on query: %s", query.statement().render())
            return None
        return result.value or []

    @staticmethod
    def _project(
        row: Mapping[str, Any], mapping: Optional[Dict[str, str]]
    ) -> Dict[str, Any]:
        """Rename slot columns back to the caller's field names."""
        if mapping is None:
            return dict(row)
        # Hive-backed catalogs hand column names back lower-cased.
        by_upper = {str(col).upper(): value for col, value in row.items()}
        return {name: by_upper.get(slot.upper()) for name, slot in mapping.items()}
