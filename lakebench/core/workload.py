"""
Workload runner.

A small YCSB-style driver: optionally loads `record_count` rows, then runs
`threads` workers that each issue `operations_per_thread` calls against a
shared LakehouseClient, following a weighted operation mix.
"""

from __future__ import annotations

import logging
import random
import string
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Optional

from lakebench.core.client import LakehouseClient
from lakebench.models import OperationKind, Status

logger = logging.getLogger(__name__)

DEFAULT_PROPORTIONS: Dict[OperationKind, int] = {
    OperationKind.READ: 50,
    OperationKind.UPDATE: 50,
}


def build_smooth_weighted_schedule(weights: Dict[str, int]) -> list[str]:
    """
    Build a smooth weighted round-robin schedule.

    This yields a stable interleaving that converges to the exact target weights
    over one full cycle (e.g., 100 slots for percentage weights).
    """
    total = int(sum(weights.values()))
    if total <= 0:
        return []
    current: Dict[str, int] = {k: 0 for k in weights}
    schedule: list[str] = []
    for _ in range(total):
        for k, w in weights.items():
            current[k] += int(w)
        k_max = max(current, key=current.__getitem__)
        schedule.append(k_max)
        current[k_max] -= total
    return schedule


def record_key(n: int) -> str:
    return f"user{n}"


@dataclass
class WorkloadResult:
    """Per-kind status counts from a run."""

    counts: Counter = field(default_factory=Counter)

    def add(self, kind: OperationKind, status: Status) -> None:
        self.counts[(kind, status)] += 1

    def total(self, kind: Optional[OperationKind] = None) -> int:
        return sum(
            n for (k, _), n in self.counts.items() if kind is None or k == kind
        )


class WorkloadRunner:
    """Drives a LakehouseClient from a pool of worker threads."""

    def __init__(
        self,
        client: LakehouseClient,
        table: str = "usertable",
        *,
        threads: int = 4,
        operations_per_thread: int = 100,
        proportions: Optional[Dict[OperationKind, int]] = None,
        record_count: int = 1000,
        field_count: int = 10,
        field_length: int = 100,
        scan_length: int = 10,
        seed: Optional[int] = None,
    ) -> None:
        if threads < 1:
            raise ValueError("threads must be >= 1")
        if not 0 < field_count <= client.field_mapper.capacity:
            raise ValueError(
                f"field_count must be between 1 and {client.field_mapper.capacity}"
            )
        self.client = client
        self.table = table
        self.threads = threads
        self.operations_per_thread = operations_per_thread
        self.record_count = max(1, record_count)
        self.field_names = [f"field{i}" for i in range(field_count)]
        self.field_length = field_length
        self.scan_length = scan_length
        self.seed = seed

        weights = {k.value: w for k, w in (proportions or DEFAULT_PROPORTIONS).items()}
        self._schedule = [
            OperationKind(k) for k in build_smooth_weighted_schedule(weights)
        ]
        if not self._schedule:
            raise ValueError("operation proportions must have a positive total")

        self._insert_seq = self.record_count
        self._insert_lock = threading.Lock()

    def _values(self, rng: random.Random) -> Dict[str, str]:
        alphabet = string.ascii_letters + string.digits
        return {
            name: "".join(rng.choices(alphabet, k=self.field_length))
            for name in self.field_names
        }

    def _next_insert_key(self) -> str:
        with self._insert_lock:
            n = self._insert_seq
            self._insert_seq += 1
        return record_key(n)

    def load(self) -> WorkloadResult:
        """Insert the initial records from a single thread."""
        rng = random.Random(self.seed)
        result = WorkloadResult()
        for n in range(self.record_count):
            status = self.client.insert(self.table, record_key(n), self._values(rng))
            result.add(OperationKind.INSERT, status)
        logger.info("Loaded %d records into %s", self.record_count, self.table)
        return result

    def _run_one(self, kind: OperationKind, rng: random.Random) -> Status:
        key = record_key(rng.randrange(self.record_count))
        if kind is OperationKind.READ:
            return self.client.read(self.table, key, None, {})
        if kind is OperationKind.SCAN:
            return self.client.scan(self.table, key, self.scan_length, None, [])
        if kind is OperationKind.UPDATE:
            field_name = rng.choice(self.field_names)
            return self.client.update(
                self.table, key, {field_name: self._values(rng)[field_name]}
            )
        if kind is OperationKind.INSERT:
            return self.client.insert(
                self.table, self._next_insert_key(), self._values(rng)
            )
        return self.client.delete(self.table, key)

    def _worker(self, worker_id: int) -> WorkloadResult:
        seed = None if self.seed is None else self.seed + worker_id + 1
        rng = random.Random(seed)
        result = WorkloadResult()
        n = len(self._schedule)
        logger.debug("Worker %d started", worker_id)
        for i in range(self.operations_per_thread):
            kind = self._schedule[(worker_id + i) % n]
            result.add(kind, self._run_one(kind, rng))
        logger.debug("Worker %d stopped", worker_id)
        return result

    def run(self) -> WorkloadResult:
        """Run every worker to completion and merge their counts."""
        total = WorkloadResult()
        with ThreadPoolExecutor(
            max_workers=self.threads, thread_name_prefix="lakebench-worker"
        ) as pool:
            futures = [pool.submit(self._worker, w) for w in range(self.threads)]
            for future in futures:
                total.counts.update(future.result().counts)
        logger.info(
            "Run finished: %d operations from %d threads",
            total.total(),
            self.threads,
        )
        return total
