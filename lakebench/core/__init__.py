"""
Core adapter components: field mapping, statement building, retrying
execution, sample collection and reporting.
"""

from lakebench.core.client import LakehouseClient
from lakebench.core.field_mapper import ATTRIBUTE_NAMES, FieldMapper
from lakebench.core.query_builder import QueryBuilder, Statement, TableQuery
from lakebench.core.report_writer import ReportWriter
from lakebench.core.retry import AttemptState, ExecutionResult, RetryingExecutor
from lakebench.core.sample_registry import RegistrySnapshot, SampleRegistry

__all__ = [
    "ATTRIBUTE_NAMES",
    "AttemptState",
    "ExecutionResult",
    "FieldMapper",
    "LakehouseClient",
    "QueryBuilder",
    "RegistrySnapshot",
    "ReportWriter",
    "RetryingExecutor",
    "SampleRegistry",
    "Statement",
    "TableQuery",
]
