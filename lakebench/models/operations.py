"""
Operation Models

Core value types shared by the adapter: operation kinds, outcomes,
statuses, latency samples and table identifiers.
"""

from dataclasses import dataclass
from enum import Enum


class Status(str, Enum):
    """Result of one CRUD call as seen by the benchmark harness."""

    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    ERROR = "ERROR"


class Outcome(str, Enum):
    """Outcome of a single attempt against the table store."""

    SUCCESS = "success"
    ERROR = "error"


class OperationKind(str, Enum):
    """Generic data-store operations issued by benchmark workers."""

    READ = "read"
    SCAN = "scan"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"

    def section_label(self, outcome: Outcome) -> str:
        """Label of this kind's section in the text report."""
        return _SECTION_LABELS[(self, outcome)]


_SECTION_LABELS = {
    (OperationKind.INSERT, Outcome.SUCCESS): "inserts",
    (OperationKind.UPDATE, Outcome.SUCCESS): "updates",
    (OperationKind.DELETE, Outcome.SUCCESS): "deletes",
    (OperationKind.READ, Outcome.SUCCESS): "reads",
    (OperationKind.SCAN, Outcome.SUCCESS): "scans",
    (OperationKind.INSERT, Outcome.ERROR): "inserts-errors",
    (OperationKind.UPDATE, Outcome.ERROR): "updates-errors",
    (OperationKind.DELETE, Outcome.ERROR): "delete-errors",
    (OperationKind.READ, Outcome.ERROR): "read-errors",
    (OperationKind.SCAN, Outcome.ERROR): "scan-errors",
}

# Section order of the text report: all successes, then all errors.
REPORT_ORDER: tuple[tuple[OperationKind, Outcome], ...] = tuple(_SECTION_LABELS)


@dataclass(frozen=True, slots=True)
class LatencySample:
    """Timing of one attempt, in nanoseconds."""

    start_ns: int
    duration_ns: int

    @property
    def duration_ms(self) -> float:
        return self.duration_ns / 1_000_000


@dataclass(frozen=True, slots=True)
class TableIdentifier:
    """Namespace-qualified table name."""

    namespace: str
    table: str

    @property
    def qualified(self) -> str:
        if not self.namespace:
            return self.table
        return f"{self.namespace}.{self.table}"

    def __str__(self) -> str:
        return self.qualified
