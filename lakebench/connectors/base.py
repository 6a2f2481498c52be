"""
Table store interfaces.

The adapter core only talks to a store through these two abstractions:
a `TableStore` that executes statements and hands out row sets, and a
`RowSet` that narrows a table by key, projects columns and limits rows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from lakebench.models import TableIdentifier

KEY_COLUMN = "YCSB_KEY"


class RowSet(ABC):
    """
    Filterable, selectable view over one table.

    Builder methods return new row sets; nothing touches the store until
    `collect()` is called.
    """

    @abstractmethod
    def where_key_equals(self, key: str) -> RowSet: ...

    @abstractmethod
    def where_key_at_least(self, key: str) -> RowSet: ...

    @abstractmethod
    def select(self, columns: Sequence[str]) -> RowSet: ...

    @abstractmethod
    def limit(self, count: int) -> RowSet: ...

    @abstractmethod
    def collect(self) -> list[dict[str, Any]]:
        """Run the query and return rows as column -> value dicts."""
        ...


class TableStore(ABC):
    """SQL-capable table store shared by all worker threads."""

    @abstractmethod
    def execute_statement(
        self, statement: str, params: Optional[Sequence[Any]] = None
    ) -> list[dict[str, Any]]:
        """
        Execute one statement with positional `?` bindings.

        Raises:
            Exception: Any store failure; the caller treats all of them alike.
        """
        ...

    @abstractmethod
    def query_table(self, table: TableIdentifier) -> RowSet: ...

    def close(self) -> None:
        """Release the underlying session (no-op by default)."""
        return None
