"""Core measurement logic for httping.

This package contains the request timing and scheduling logic:
- phase_timer: Per-phase timing of a single request
- executor: One instrumented GET request
- pacer: Minimum cadence between requests
- loop: The run loop and its counters
- stats: Latency statistics over a run
- cancel: One-shot cancellation shared by both waits
"""

from .cancel import CancelToken
from .executor import RequestExecutor, RequestOutcome, build_headers
from .loop import LoopState, Reporter, RunLoop, RunState
from .pacer import Pacer, compute_wait
from .phase_timer import PhaseTimer
from .stats import StatsAggregator, percentile

__all__ = [
    "CancelToken",
    "LoopState",
    "Pacer",
    "PhaseTimer",
    "Reporter",
    "RequestExecutor",
    "RequestOutcome",
    "RunLoop",
    "RunState",
    "StatsAggregator",
    "build_headers",
    "compute_wait",
    "percentile",
]
