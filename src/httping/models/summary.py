"""Aggregate latency statistics for a finished run."""

from pydantic import BaseModel, Field


class LatencySummary(BaseModel):
    """Statistics over the totals counted toward a run.

    Only built when at least one total was observed, so every figure is a
    real measurement.
    """

    count: int = Field(description="Number of totals summarized")
    min_ms: float
    max_ms: float
    mean_ms: float
    percentiles: dict[int, float] = Field(
        default_factory=dict, description="Percentile rank to latency in ms"
    )
