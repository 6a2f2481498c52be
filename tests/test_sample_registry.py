"""
Tests for SampleRegistry, including concurrent appends from many threads.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from lakebench.core.sample_registry import SampleRegistry
from lakebench.errors import RegistryDrainedError
from lakebench.models import LatencySample, OperationKind, Outcome


class TestAppendAndDrain:
    """Tests for basic bookkeeping."""

    def test_starts_empty(self, registry):
        snapshot = registry.drain_all()
        assert snapshot.total_samples == 0
        assert snapshot.redos == 0
        assert len(snapshot.samples) == 10

    def test_samples_land_in_their_bucket(self, registry):
        registry.append(OperationKind.READ, Outcome.SUCCESS, LatencySample(1, 2))
        registry.append(OperationKind.READ, Outcome.ERROR, LatencySample(3, 4))
        registry.append(OperationKind.SCAN, Outcome.SUCCESS, LatencySample(5, 6))

        snapshot = registry.drain_all()
        assert snapshot.bucket(OperationKind.READ, Outcome.SUCCESS) == [LatencySample(1, 2)]
        assert snapshot.bucket(OperationKind.READ, Outcome.ERROR) == [LatencySample(3, 4)]
        assert snapshot.bucket(OperationKind.SCAN, Outcome.SUCCESS) == [LatencySample(5, 6)]
        assert snapshot.bucket(OperationKind.INSERT, Outcome.SUCCESS) == []

    def test_redo_counter(self, registry):
        assert registry.record_redo("A") == 1
        assert registry.record_redo("A") == 2
        assert registry.record_redo("B") == 3
        snapshot = registry.drain_all()
        assert snapshot.redos == 3
        assert snapshot.error_categories == {"A": 2, "B": 1}

    def test_drain_only_once(self, registry):
        registry.drain_all()
        with pytest.raises(RegistryDrainedError):
            registry.drain_all()

    def test_summary(self, registry):
        for ms in (1, 2, 3, 4):
            registry.append(
                OperationKind.INSERT, Outcome.SUCCESS, LatencySample(0, ms * 1_000_000)
            )
        registry.append(OperationKind.INSERT, Outcome.ERROR, LatencySample(0, 10))
        registry.record_redo("X")

        summary = registry.drain_all().summarize()
        insert = summary.operations["insert"]

        assert set(summary.operations) == {"insert"}
        assert insert.count == 5
        assert insert.success_count == 4
        assert insert.error_count == 1
        assert insert.error_rate == pytest.approx(0.2)
        assert insert.latency.min == 1.0
        assert insert.latency.max == 4.0
        assert insert.latency.avg == 2.5
        assert summary.redos == 1
        assert summary.total_attempts == 5


class TestConcurrency:
    """Concurrent appends must neither lose nor duplicate samples."""

    def test_parallel_appends_and_redos(self):
        registry = SampleRegistry()
        threads = 16
        per_thread = 2_000
        kinds = list(OperationKind)
        barrier = threading.Barrier(threads)

        def worker(worker_id: int) -> None:
            kind = kinds[worker_id % len(kinds)]
            barrier.wait()
            for i in range(per_thread):
                outcome = Outcome.ERROR if i % 4 == 0 else Outcome.SUCCESS
                registry.append(kind, outcome, LatencySample(worker_id, i))
                if outcome is Outcome.ERROR:
                    registry.record_redo("E")

        with ThreadPoolExecutor(max_workers=threads) as pool:
            list(pool.map(worker, range(threads)))

        snapshot = registry.drain_all()
        assert snapshot.total_samples == threads * per_thread
        assert snapshot.redos == threads * per_thread // 4

        all_samples = [s for bucket in snapshot.samples.values() for s in bucket]
        assert len(set(all_samples)) == threads * per_thread

        for idx, kind in enumerate(kinds):
            writers = len([w for w in range(threads) if w % len(kinds) == idx])
            total = len(snapshot.bucket(kind, Outcome.SUCCESS)) + len(
                snapshot.bucket(kind, Outcome.ERROR)
            )
            assert total == writers * per_thread
