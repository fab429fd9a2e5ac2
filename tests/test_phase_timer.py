"""Tests for PhaseTimer."""

import pytest

from httping.core.phase_timer import PhaseTimer
from httping.models import TimingRecord


class FakeClock:
    """Manually advanced clock in seconds."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestPhaseDurations:
    """Tests for per-phase durations."""

    def test_full_new_connection(self, clock: FakeClock) -> None:
        """Every phase of a fresh TLS connection is recorded."""
        record = TimingRecord()
        with PhaseTimer(record, clock=clock) as timer:
            timer.dns_started()
            clock.advance(10)
            timer.dns_done()
            timer.connect_started()
            clock.advance(20)
            timer.connect_done()
            timer.tls_started()
            clock.advance(30)
            timer.tls_done()
            timer.connection_acquired()
            clock.advance(40)
            timer.first_byte()
            timer.download_started()
            clock.advance(5)
            timer.download_done()

        assert record.dns_ms == pytest.approx(10)
        assert record.connect_ms == pytest.approx(20)
        assert record.tls_ms == pytest.approx(30)
        assert record.reused is False
        assert record.download_ms == pytest.approx(5)
        assert record.total_ms == pytest.approx(105)

    def test_ttfb_is_cumulative(self, clock: FakeClock) -> None:
        """TTFB counts from the request start, not from the previous phase."""
        record = TimingRecord()
        with PhaseTimer(record, clock=clock) as timer:
            timer.dns_started()
            clock.advance(10)
            timer.dns_done()
            timer.connect_started()
            clock.advance(20)
            timer.connect_done()
            timer.connection_acquired()
            clock.advance(15)
            timer.first_byte()

        assert record.ttfb_ms == pytest.approx(45)

    def test_reused_connection(self, clock: FakeClock) -> None:
        """Without a connect phase the connection counts as reused."""
        record = TimingRecord()
        with PhaseTimer(record, clock=clock) as timer:
            timer.connection_acquired()
            clock.advance(3)
            timer.first_byte()

        assert record.reused is True
        assert record.dns_ms is None
        assert record.connect_ms is None
        assert record.tls_ms is None
        assert record.ttfb_ms == pytest.approx(3)

    def test_zero_duration_is_a_value(self, clock: FakeClock) -> None:
        """A phase that took no time is 0.0, not missing."""
        record = TimingRecord()
        with PhaseTimer(record, clock=clock) as timer:
            timer.dns_started()
            timer.dns_done()

        assert record.dns_ms == 0.0

    def test_done_without_start_ignored(self, clock: FakeClock) -> None:
        record = TimingRecord()
        with PhaseTimer(record, clock=clock) as timer:
            timer.tls_done()
            timer.download_done()

        assert record.tls_ms is None
        assert record.download_ms is None

    def test_first_acquisition_wins(self, clock: FakeClock) -> None:
        record = TimingRecord()
        with PhaseTimer(record, clock=clock) as timer:
            timer.connection_acquired()
            timer.connect_started()
            timer.connection_acquired()

        assert record.reused is True


class TestTotal:
    """Tests for the guaranteed total."""

    def test_total_set_on_exception(self, clock: FakeClock) -> None:
        """Leaving the context through an error still stamps the total."""
        record = TimingRecord()
        with pytest.raises(RuntimeError):
            with PhaseTimer(record, clock=clock) as timer:
                timer.dns_started()
                clock.advance(7)
                raise RuntimeError("boom")

        assert record.total_ms == pytest.approx(7)
        assert record.dns_ms is None

    def test_total_set_on_early_return(self, clock: FakeClock) -> None:
        record = TimingRecord()

        def run() -> TimingRecord:
            with PhaseTimer(record, clock=clock):
                clock.advance(12)
                return record

        assert run().total_ms == pytest.approx(12)

    def test_total_non_negative_with_real_clock(self) -> None:
        record = TimingRecord()
        with PhaseTimer(record):
            pass
        assert record.total_ms is not None
        assert record.total_ms >= 0


@pytest.mark.asyncio
class TestTraceEvents:
    """Tests for httpcore trace event handling."""

    async def test_tls_events(self, clock: FakeClock) -> None:
        record = TimingRecord()
        with PhaseTimer(record, clock=clock) as timer:
            await timer.trace("connection.start_tls.started", {})
            clock.advance(25)
            await timer.trace("connection.start_tls.complete", {})

        assert record.tls_ms == pytest.approx(25)

    async def test_failed_tls_handshake_still_timed(self, clock: FakeClock) -> None:
        record = TimingRecord()
        with PhaseTimer(record, clock=clock) as timer:
            await timer.trace("connection.start_tls.started", {})
            clock.advance(8)
            await timer.trace("connection.start_tls.failed", {})

        assert record.tls_ms == pytest.approx(8)

    @pytest.mark.parametrize("protocol", ["http11", "http2"])
    async def test_request_and_response_headers(self, clock: FakeClock, protocol: str) -> None:
        record = TimingRecord()
        with PhaseTimer(record, clock=clock) as timer:
            await timer.trace(f"{protocol}.send_request_headers.started", {})
            clock.advance(9)
            await timer.trace(f"{protocol}.receive_response_headers.complete", {})

        assert record.reused is True
        assert record.ttfb_ms == pytest.approx(9)

    async def test_unrelated_events_ignored(self, clock: FakeClock) -> None:
        record = TimingRecord()
        with PhaseTimer(record, clock=clock) as timer:
            await timer.trace("http11.send_request_body.started", {})
            await timer.trace("http11.response_closed.complete", {})

        assert record.model_dump(exclude={"total_ms"}) == TimingRecord().model_dump(
            exclude={"total_ms"}
        )
