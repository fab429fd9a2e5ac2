"""Request loop runner for httping.

Each iteration:
1. Sends one request through the executor
2. Counts it as successful or failed and feeds the statistics
3. Reports the result line
4. Waits until the next request is due

The loop ends when the request count is reached or the run is cancelled.
A request interrupted by cancellation is neither counted nor reported.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from ..config import HttpingConfig
from ..errors import RunCancelled
from ..models import TimingRecord
from .cancel import CancelToken
from .executor import RequestOutcome
from .pacer import Pacer
from .stats import StatsAggregator

logger = logging.getLogger(__name__)

# Called once per counted attempt with its timings and error message
Reporter = Callable[[TimingRecord, str | None], None]


class Executor(Protocol):
    async def execute(self, url: str, token: CancelToken) -> RequestOutcome: ...


class LoopState(str, Enum):
    """Lifecycle of a run loop."""

    RUNNING = "running"
    STOPPING = "stopping"
    DONE = "done"


@dataclass
class RunState:
    """Counters and statistics of a run.

    Attributes:
        requests_sent: Attempts counted toward the run
        successful: Attempts that completed
        failed: Attempts that ended with a transport error
        stats: Totals counted toward the statistics
    """

    requests_sent: int = 0
    successful: int = 0
    failed: int = 0
    stats: StatsAggregator = field(default_factory=StatsAggregator)

    @property
    def observed_totals(self) -> list[float]:
        return self.stats.values


class RunLoop:
    """Sends paced, strictly sequential requests until done.

    Example:
        >>> loop = RunLoop(config, executor, reporter)
        >>> state = await loop.run()
        >>> print(f"{state.successful}/{state.requests_sent} succeeded")
    """

    def __init__(
        self,
        config: HttpingConfig,
        executor: Executor,
        reporter: Reporter,
        token: CancelToken | None = None,
        pacer: Pacer | None = None,
    ) -> None:
        """Initialize the loop.

        Args:
            config: Run configuration
            executor: Sends a single request
            reporter: Receives each counted attempt
            token: Cancellation token (a fresh one if omitted)
            pacer: Pacing policy (from config.delay_ms if omitted)
        """
        self.config = config
        self.executor = executor
        self.reporter = reporter
        self.token = token or CancelToken()
        self.pacer = pacer or Pacer(config.delay_ms)
        self.state = LoopState.RUNNING
        self.run_state = RunState()

    def stop(self) -> None:
        """Interrupt the run. Safe to call more than once."""
        if self.state is LoopState.RUNNING:
            self.state = LoopState.STOPPING
            logger.debug("Stopping run loop")
        self.token.cancel()

    async def run(self) -> RunState:
        """Run until the count limit is reached or stop() is called.

        Returns:
            Counters and statistics of the completed attempts
        """
        try:
            while self.state is LoopState.RUNNING:
                try:
                    outcome = await self.executor.execute(self.config.url, self.token)
                except RunCancelled:
                    logger.debug("Request interrupted, not counted")
                    break

                self._record(outcome)

                if self.config.count and self.run_state.requests_sent >= self.config.count:
                    logger.debug(f"Request count {self.config.count} reached")
                    break

                total_ms = outcome.record.total_ms or 0.0
                try:
                    await self.pacer.pause(total_ms, self.token)
                except RunCancelled:
                    logger.debug("Interrupted while waiting for the next request")
                    break
        finally:
            self.state = LoopState.DONE
        return self.run_state

    def _record(self, outcome: RequestOutcome) -> None:
        state = self.run_state
        state.requests_sent += 1
        record = outcome.record

        if outcome.ok:
            state.successful += 1
            counted = not (self.config.exclude_new_connections and not record.reused)
            if counted and record.total_ms is not None:
                state.stats.add(record.total_ms)
            elif not counted:
                logger.debug("New connection, total left out of statistics")
        else:
            state.failed += 1

        self.reporter(record, outcome.error_message)
