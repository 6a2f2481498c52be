"""
Error types and store failure classification.
"""

from __future__ import annotations

import re

_SQLSTATE_RE = re.compile(r"\(\s*(\d{5})\s*\)")


class LakebenchError(Exception):
    """Base class for lakebench errors."""


class StoreError(LakebenchError):
    """A table store call failed (network, availability or bad statement)."""

    def __init__(self, message: str, *, category: str | None = None) -> None:
        super().__init__(message)
        self.category = category or "StoreError"


class FieldMappingError(LakebenchError, ValueError):
    """More logical fields were supplied than there are attribute slots."""


class RegistryDrainedError(LakebenchError, RuntimeError):
    """The sample registry was already drained for this run."""


def classify_store_error(exc: BaseException) -> str:
    """
    Return a stable, low-cardinality category for a failed store call.

    Failures are expected under load, so they are counted per category
    instead of being logged one by one.
    """
    category = getattr(exc, "category", None)
    if isinstance(exc, StoreError) and category:
        return category

    sqlstate = getattr(exc, "sqlstate", None)
    if sqlstate:
        return f"SQLSTATE_{sqlstate}"

    # Spark and Snowflake both embed "(XXXXX)" style sqlstates in messages.
    m = _SQLSTATE_RE.search(str(exc or ""))
    if m:
        return f"SQLSTATE_{m.group(1)}"

    return type(exc).__name__
