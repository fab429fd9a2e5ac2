"""Tests for the run lifecycle."""

import asyncio
import os
import signal

import pytest

from httping.config import HttpingConfig
from httping.core.cancel import CancelToken
from httping.core.executor import RequestOutcome
from httping.errors import RunCancelled
from httping.models import TimingRecord
from httping.run import interrupt_listener, ping


class SteadyExecutor:
    """Answers every request successfully after a short pause."""

    def __init__(self) -> None:
        self.calls = 0

    async def execute(self, url: str, token: CancelToken) -> RequestOutcome:
        self.calls += 1
        await token.race(asyncio.sleep(0.01))
        return RequestOutcome(record=TimingRecord(total_ms=10.0, reused=False))


def noop_reporter(record: TimingRecord, error: str | None) -> None:
    pass


@pytest.mark.asyncio
class TestPing:
    """Tests for ping."""

    async def test_runs_count_requests(self) -> None:
        executor = SteadyExecutor()
        config = HttpingConfig(url="http://127.0.0.1/", count=3, delay_ms=0)

        state = await ping(config, noop_reporter, executor=executor, handle_interrupt=False)

        assert executor.calls == 3
        assert state.requests_sent == 3
        assert state.observed_totals == [10.0, 10.0, 10.0]

    async def test_sigint_stops_run(self) -> None:
        """Ctrl+C ends an unbounded run and keeps what was measured."""
        executor = SteadyExecutor()
        config = HttpingConfig(url="http://127.0.0.1/", count=0, delay_ms=20)
        loop = asyncio.get_running_loop()
        loop.call_later(0.1, os.kill, os.getpid(), signal.SIGINT)

        state = await asyncio.wait_for(ping(config, noop_reporter, executor=executor), timeout=5)

        assert state.requests_sent >= 1
        assert state.requests_sent == state.successful

    @pytest.mark.integration
    async def test_owned_executor_is_closed(self, closed_port: int) -> None:
        """Without an injected executor, ping dials for real and cleans up."""
        reports: list[str | None] = []
        config = HttpingConfig(url=f"http://127.0.0.1:{closed_port}/", count=2, delay_ms=0)

        state = await ping(config, lambda record, error: reports.append(error))

        assert state.requests_sent == 2
        assert state.failed == 2
        assert state.stats.summarize() is None
        assert all(reports)


@pytest.mark.asyncio
class TestInterruptListener:
    """Tests for interrupt_listener."""

    async def test_handler_installed_and_removed(self) -> None:
        calls: list[int] = []
        with interrupt_listener(lambda: calls.append(1)):
            os.kill(os.getpid(), signal.SIGINT)
            await asyncio.sleep(0.05)
        assert calls == [1]

    async def test_stop_cancels_pending_work(self) -> None:
        token = CancelToken()
        with interrupt_listener(token.cancel):
            asyncio.get_running_loop().call_later(0.05, os.kill, os.getpid(), signal.SIGINT)
            with pytest.raises(RunCancelled):
                await token.race(asyncio.sleep(5))
