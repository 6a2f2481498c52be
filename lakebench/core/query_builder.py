"""
Query Builder

Builds one statement per operation kind. Statements carry `?` placeholders
and bound values; `Statement.render()` produces the equivalent literal SQL
text (single quotes in values replaced) for logging and for stores that
cannot bind parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from lakebench.connectors.base import KEY_COLUMN, TableStore
from lakebench.core.field_mapper import FieldMapper
from lakebench.errors import FieldMappingError
from lakebench.models import OperationKind, TableIdentifier

NULL_MARKER = "NULL"
QUOTE_SUBSTITUTE = "r"


def to_text(value: Any) -> Optional[str]:
    """Convert a field value to the string stored in the table."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def sanitize(value: str) -> str:
    """Make a value safe to embed between single quotes."""
    return value.replace("'", QUOTE_SUBSTITUTE)


def sql_literal(value: Any) -> str:
    text = to_text(value)
    if text is None:
        return NULL_MARKER
    return f"'{sanitize(text)}'"


@dataclass(frozen=True)
class Statement:
    """A DML statement with positional bindings."""

    kind: OperationKind
    text: str
    params: tuple[Any, ...] = ()

    def render(self) -> str:
        """Inline the bound values as SQL literals."""
        parts = self.text.split("?")
        if len(parts) - 1 != len(self.params):
            raise ValueError(
                f"{len(parts) - 1} placeholders but {len(self.params)} values"
            )
        out = [parts[0]]
        for value, rest in zip(self.params, parts[1:]):
            out.append(sql_literal(value))
            out.append(rest)
        return "".join(out)


@dataclass(frozen=True)
class TableQuery:
    """A key-predicate read against a table's row set (Read and Scan)."""

    kind: OperationKind
    table: TableIdentifier
    key: str
    inclusive_range: bool = False
    row_limit: Optional[int] = None
    columns: tuple[str, ...] = field(default_factory=tuple)

    def run(self, store: TableStore) -> list[dict[str, Any]]:
        rows = store.query_table(self.table)
        if self.inclusive_range:
            rows = rows.where_key_at_least(self.key)
        else:
            rows = rows.where_key_equals(self.key)
        if self.columns:
            rows = rows.select(self.columns)
        if self.row_limit is not None:
            rows = rows.limit(self.row_limit)
        return rows.collect()

    def statement(self) -> Statement:
        """The equivalent SQL text, for logging."""
        projection = ", ".join(self.columns) if self.columns else "*"
        op = ">=" if self.inclusive_range else "="
        text = f"SELECT {projection} FROM {self.table.qualified} WHERE {KEY_COLUMN} {op} ?"
        if self.inclusive_range:
            text += f" ORDER BY {KEY_COLUMN}"
        if self.row_limit is not None:
            text += f" LIMIT {self.row_limit}"
        return Statement(self.kind, text, (self.key,))


class QueryBuilder:
    """Builds statements for one namespace using a field mapper."""

    def __init__(self, field_mapper: FieldMapper) -> None:
        self.field_mapper = field_mapper

    def insert(
        self, table: TableIdentifier, key: str, values: Mapping[str, Any]
    ) -> Statement:
        """
        INSERT with the key followed by exactly one value per slot.

        Slots without a field are bound to NULL, so every row carries all
        attribute columns.
        """
        slots = self.field_mapper.slots
        mapping = self.field_mapper.map_fields(values.keys()) or {}
        by_slot = {slot: to_text(values[name]) for name, slot in mapping.items()}
        params = (key, *(by_slot.get(slot) for slot in slots))
        placeholders = ", ".join("?" for _ in params)
        text = f"INSERT INTO {table.qualified} VALUES ({placeholders})"
        return Statement(OperationKind.INSERT, text, params)

    def update(
        self, table: TableIdentifier, key: str, values: Mapping[str, Any]
    ) -> Statement:
        mapping = self.field_mapper.map_fields(values.keys())
        if not mapping:
            raise FieldMappingError("update requires at least one field")
        assignments = ", ".join(f"{slot} = ?" for slot in mapping.values())
        params = (*(to_text(values[name]) for name in mapping), key)
        text = f"UPDATE {table.qualified} SET {assignments} WHERE {KEY_COLUMN} = ?"
        return Statement(OperationKind.UPDATE, text, params)

    def delete(self, table: TableIdentifier, key: str) -> Statement:
        text = f"DELETE FROM {table.qualified} WHERE {KEY_COLUMN} = ?"
        return Statement(OperationKind.DELETE, text, (key,))

    def read(
        self, table: TableIdentifier, key: str, mapping: Optional[dict[str, str]]
    ) -> TableQuery:
        columns = tuple(mapping.values()) if mapping else ()
        return TableQuery(OperationKind.READ, table, key, columns=columns)

    def scan(
        self,
        table: TableIdentifier,
        start_key: str,
        record_count: int,
        mapping: Optional[dict[str, str]],
    ) -> TableQuery:
        columns = tuple(mapping.values()) if mapping else ()
        return TableQuery(
            OperationKind.SCAN,
            table,
            start_key,
            inclusive_range=True,
            row_limit=record_count,
            columns=columns,
        )
