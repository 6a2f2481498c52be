"""
Metrics Models

Pydantic models summarizing the latency samples collected during a run.
"""

from typing import Dict, List

from pydantic import BaseModel, Field


class LatencyPercentiles(BaseModel):
    """Latency percentile metrics (in milliseconds)."""

    p50: float = Field(0.0, description="50th percentile (median)")
    p90: float = Field(0.0, description="90th percentile")
    p95: float = Field(0.0, description="95th percentile")
    p99: float = Field(0.0, description="99th percentile")
    min: float = Field(0.0, description="Minimum latency")
    max: float = Field(0.0, description="Maximum latency")
    avg: float = Field(0.0, description="Average latency")

    @classmethod
    def from_latencies(cls, latencies: List[float]) -> "LatencyPercentiles":
        """Compute percentiles with linear interpolation between ranks."""
        if not latencies:
            return cls()

        ordered = sorted(latencies)
        n = len(ordered)

        def percentile(p: float) -> float:
            k = (n - 1) * p
            f = int(k)
            c = k - f
            if f + 1 < n:
                return ordered[f] * (1 - c) + ordered[f + 1] * c
            return ordered[f]

        return cls(
            p50=percentile(0.50),
            p90=percentile(0.90),
            p95=percentile(0.95),
            p99=percentile(0.99),
            min=ordered[0],
            max=ordered[-1],
            avg=sum(ordered) / n,
        )


class OperationMetrics(BaseModel):
    """Metrics for one operation kind."""

    count: int = Field(0, description="Number of attempts")
    success_count: int = Field(0, description="Successful attempts")
    error_count: int = Field(0, description="Failed attempts")
    latency: LatencyPercentiles = Field(
        default_factory=LatencyPercentiles,
        description="Latency percentiles of successful attempts",
    )

    @property
    def error_rate(self) -> float:
        """Failed attempts over all attempts (0.0-1.0)."""
        if self.count == 0:
            return 0.0
        return self.error_count / self.count


class RunSummary(BaseModel):
    """End-of-run rollup of the sample registry."""

    operations: Dict[str, OperationMetrics] = Field(
        default_factory=dict, description="Metrics keyed by operation kind"
    )
    redos: int = Field(0, description="Failed attempts across all kinds")
    error_categories: Dict[str, int] = Field(
        default_factory=dict, description="Failed attempts by error category"
    )

    @property
    def total_attempts(self) -> int:
        return sum(m.count for m in self.operations.values())
