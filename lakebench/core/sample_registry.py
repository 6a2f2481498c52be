"""
Sample Registry

Thread-safe accumulator for per-attempt latency samples, owned by one
adapter instance and shared by all of its worker threads.

Samples go into ten append-only buckets, one per (operation kind, outcome).
Bucket appends use `collections.deque.append`, which is atomic, so workers
never block each other on the hot path. The redo counter and the error
category counts are guarded by a single lock.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Tuple

from lakebench.errors import RegistryDrainedError
from lakebench.models import (
    LatencyPercentiles,
    LatencySample,
    OperationKind,
    OperationMetrics,
    Outcome,
    RunSummary,
)

logger = logging.getLogger(__name__)

BucketKey = Tuple[OperationKind, Outcome]


@dataclass(frozen=True)
class RegistrySnapshot:
    """Everything the registry collected, taken once at shutdown."""

    samples: Dict[BucketKey, list[LatencySample]]
    redos: int
    error_categories: Dict[str, int] = field(default_factory=dict)

    def bucket(self, kind: OperationKind, outcome: Outcome) -> list[LatencySample]:
        return self.samples.get((kind, outcome), [])

    @property
    def total_samples(self) -> int:
        return sum(len(v) for v in self.samples.values())

    def summarize(self) -> RunSummary:
        """Roll the samples up into per-kind counts and percentiles."""
        operations: Dict[str, OperationMetrics] = {}
        for kind in OperationKind:
            ok = self.bucket(kind, Outcome.SUCCESS)
            failed = self.bucket(kind, Outcome.ERROR)
            if not ok and not failed:
                continue
            operations[kind.value] = OperationMetrics(
                count=len(ok) + len(failed),
                success_count=len(ok),
                error_count=len(failed),
                latency=LatencyPercentiles.from_latencies(
                    [s.duration_ms for s in ok]
                ),
            )
        return RunSummary(
            operations=operations,
            redos=self.redos,
            error_categories=dict(self.error_categories),
        )


class SampleRegistry:
    """Per-kind, per-outcome latency samples plus the global redo counter."""

    def __init__(self) -> None:
        self._buckets: Dict[BucketKey, deque[LatencySample]] = {
            (kind, outcome): deque() for kind in OperationKind for outcome in Outcome
        }
        self._lock = threading.Lock()
        self._redos = 0
        self._error_categories: Dict[str, int] = {}
        self._drained = False

    def append(
        self, kind: OperationKind, outcome: Outcome, sample: LatencySample
    ) -> None:
        self._buckets[(kind, outcome)].append(sample)

    def record_redo(self, category: str = "unknown") -> int:
        """Count one failed attempt; returns the new redo total."""
        with self._lock:
            self._redos += 1
            self._error_categories[category] = (
                self._error_categories.get(category, 0) + 1
            )
            return self._redos

    @property
    def redos(self) -> int:
        with self._lock:
            return self._redos

    def count(self, kind: OperationKind, outcome: Outcome) -> int:
        return len(self._buckets[(kind, outcome)])

    def drain_all(self) -> RegistrySnapshot:
        """
        Take every collected sample and the counters.

        Raises:
            RegistryDrainedError: Called more than once.
        """
        with self._lock:
            if self._drained:
                raise RegistryDrainedError("sample registry already drained")
            self._drained = True
            samples = {key: list(bucket) for key, bucket in self._buckets.items()}
            for bucket in self._buckets.values():
                bucket.clear()
            snapshot = RegistrySnapshot(
                samples=samples,
                redos=self._redos,
                error_categories=dict(self._error_categories),
            )

        logger.debug(
            "Drained %d samples (%d redos)", snapshot.total_samples, snapshot.redos
        )
        return snapshot
