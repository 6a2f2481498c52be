"""
Data models for Lakebench.

This package contains:
- Operation value types (kinds, outcomes, statuses, samples, tables)
- Pydantic run summary models
"""

from lakebench.models.operations import (
    REPORT_ORDER,
    LatencySample,
    OperationKind,
    Outcome,
    Status,
    TableIdentifier,
)

from lakebench.models.metrics import (
    LatencyPercentiles,
    OperationMetrics,
    RunSummary,
)

__all__ = [
    # operations
    "REPORT_ORDER",
    "LatencySample",
    "OperationKind",
    "Outcome",
    "Status",
    "TableIdentifier",
    # metrics
    "LatencyPercentiles",
    "OperationMetrics",
    "RunSummary",
]
