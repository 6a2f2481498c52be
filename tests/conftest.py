"""
Global pytest configuration and fixtures for lakebench tests.

This module provides:
- An in-memory TableStore double with failure injection
- A deterministic nanosecond clock
- Client / registry factories wired to the fake store
"""

from __future__ import annotations

import itertools
import re
import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Sequence

import pytest

from lakebench.connectors.base import KEY_COLUMN, RowSet, TableStore
from lakebench.core.client import LakehouseClient
from lakebench.core.field_mapper import ATTRIBUTE_NAMES
from lakebench.core.retry import RetryingExecutor
from lakebench.core.sample_registry import SampleRegistry
from lakebench.errors import StoreError
from lakebench.models import TableIdentifier

TEST_NAMESPACE = "spark_catalog.ycsb"

_SET_RE = re.compile(r"(FIELD\d+) = \?")


# =============================================================================
# In-memory table store
# =============================================================================


@dataclass(frozen=True)
class FakeRowSet(RowSet):
    store: "FakeTableStore"
    table: str
    op: Optional[str] = None
    key: Optional[str] = None
    columns: tuple[str, ...] = ()
    row_limit: Optional[int] = None

    def where_key_equals(self, key: str) -> "FakeRowSet":
        return replace(self, op="=", key=key)

    def where_key_at_least(self, key: str) -> "FakeRowSet":
        return replace(self, op=">=", key=key)

    def select(self, columns: Sequence[str]) -> "FakeRowSet":
        return replace(self, columns=tuple(columns))

    def limit(self, count: int) -> "FakeRowSet":
        return replace(self, row_limit=count)

    def collect(self) -> list[dict[str, Any]]:
        self.store.maybe_fail()
        rows = self.store.rows_of(self.table)
        if self.op == "=":
            rows = [r for r in rows if r[KEY_COLUMN] == self.key]
        elif self.op == ">=":
            rows = [r for r in rows if r[KEY_COLUMN] >= self.key]
        if self.columns:
            rows = [{c: r.get(c) for c in self.columns} for r in rows]
        if self.row_limit is not None:
            rows = rows[: self.row_limit]
        return rows


class FakeTableStore(TableStore):
    """
    Thread-safe in-memory store that understands the adapter's statements.

    Set `failures` to make the next N calls raise, or `always_fail` to make
    every call raise.
    """

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, dict[str, Any]]] = {}
        self.statements: list[tuple[str, tuple[Any, ...]]] = []
        self.failures = 0
        self.always_fail = False
        self.calls = 0
        self.closed = False
        self._lock = threading.Lock()

    def maybe_fail(self) -> None:
        with self._lock:
            self.calls += 1
            if self.always_fail:
                raise StoreError("store unavailable", category="UNAVAILABLE")
            if self.failures > 0:
                self.failures -= 1
                raise RuntimeError("transient failure (57014)")

    def rows_of(self, table: str) -> list[dict[str, Any]]:
        with self._lock:
            rows = self.tables.get(table, {})
            return [dict(rows[k]) for k in sorted(rows)]

    def execute_statement(
        self, statement: str, params: Optional[Sequence[Any]] = None
    ) -> list[dict[str, Any]]:
        self.maybe_fail()
        params = tuple(params or ())
        with self._lock:
            self.statements.append((statement, params))
            words = statement.split()
            if words[0] == "INSERT":
                table = self.tables.setdefault(words[2], {})
                row = {KEY_COLUMN: params[0]}
                row.update(zip(ATTRIBUTE_NAMES, params[1:]))
                table[params[0]] = row
            elif words[0] == "UPDATE":
                row = self.tables.get(words[1], {}).get(params[-1])
                if row is not None:
                    row.update(zip(_SET_RE.findall(statement), params[:-1]))
            elif words[0] == "DELETE":
                self.tables.get(words[2], {}).pop(params[0], None)
        return []

    def query_table(self, table: TableIdentifier) -> FakeRowSet:
        return FakeRowSet(store=self, table=table.qualified)

    def close(self) -> None:
        self.closed = True


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def store() -> FakeTableStore:
    return FakeTableStore()


@pytest.fixture
def registry() -> SampleRegistry:
    return SampleRegistry()


@pytest.fixture
def fake_clock() -> Callable[[], int]:
    """Clock that advances 1000ns per reading."""
    counter = itertools.count(start=1_000, step=1_000)
    lock = threading.Lock()

    def _clock() -> int:
        with lock:
            return next(counter)

    return _clock


@pytest.fixture
def client(store: FakeTableStore, registry: SampleRegistry) -> LakehouseClient:
    return LakehouseClient(
        store,
        TEST_NAMESPACE,
        registry=registry,
        executor=RetryingExecutor(registry, max_attempts=10),
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )
