"""Phase timing for a single HTTP request.

The timer is fed from two sides while a request runs:

- the timed network backend reports DNS and TCP connect boundaries
  and the first response byte read off the socket, finding the timer
  through a context variable set for each request
- httpcore's ``trace`` request extension reports the TLS handshake and
  the moment a connection starts carrying the request; the arrival of
  the response headers stands in for the first byte when no read was seen

The executor reports the body download itself. Leaving the timer's
context always stamps ``total_ms``, whichever way the request ended.
"""

import logging
import time
from collections.abc import Callable
from types import TracebackType
from typing import Any

from ..models import TimingRecord

logger = logging.getLogger(__name__)

_TLS_STARTED = "connection.start_tls.started"
_TLS_FINISHED = ("connection.start_tls.complete", "connection.start_tls.failed")
_REQUEST_HEADERS_STARTED = (
    "http11.send_request_headers.started",
    "http2.send_request_headers.started",
)
_RESPONSE_HEADERS_COMPLETE = (
    "http11.receive_response_headers.complete",
    "http2.receive_response_headers.complete",
)


def _elapsed_ms(start: float, end: float) -> float:
    return (end - start) * 1000.0


class PhaseTimer:
    """Records phase durations of one request into a TimingRecord.

    Example:
        >>> record = TimingRecord()
        >>> with PhaseTimer(record) as timer:
        ...     timer.dns_started()
        ...     timer.dns_done()
        >>> record.total_ms is not None
        True
    """

    def __init__(
        self,
        record: TimingRecord,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Initialize the timer.

        Args:
            record: Record to fill in place
            clock: Monotonic clock returning seconds
        """
        self.record = record
        self._clock = clock
        self._request_start: float | None = None
        self._dns_start: float | None = None
        self._connect_start: float | None = None
        self._tls_start: float | None = None
        self._download_start: float | None = None

    def __enter__(self) -> "PhaseTimer":
        self._request_start = self._clock()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        assert self._request_start is not None
        self.record.total_ms = _elapsed_ms(self._request_start, self._clock())

    @property
    def dialed(self) -> bool:
        """True if this request opened a new TCP connection."""
        return self._connect_start is not None

    def dns_started(self) -> None:
        self._dns_start = self._clock()

    def dns_done(self) -> None:
        if self._dns_start is not None:
            self.record.dns_ms = _elapsed_ms(self._dns_start, self._clock())

    def connect_started(self) -> None:
        self._connect_start = self._clock()

    def connect_done(self) -> None:
        if self._connect_start is not None:
            self.record.connect_ms = _elapsed_ms(self._connect_start, self._clock())

    def tls_started(self) -> None:
        self._tls_start = self._clock()

    def tls_done(self) -> None:
        if self._tls_start is not None:
            self.record.tls_ms = _elapsed_ms(self._tls_start, self._clock())

    def connection_acquired(self) -> None:
        """Record whether the connection carrying the request was pooled."""
        if self.record.reused is None:
            self.record.reused = not self.dialed
            logger.debug(f"Connection acquired (reused={self.record.reused})")

    def first_byte(self) -> None:
        # Cumulative: measured from the start of the request
        assert self._request_start is not None
        if self.record.ttfb_ms is None:
            self.record.ttfb_ms = _elapsed_ms(self._request_start, self._clock())

    def download_started(self) -> None:
        self._download_start = self._clock()

    def download_done(self) -> None:
        if self._download_start is not None:
            self.record.download_ms = _elapsed_ms(self._download_start, self._clock())

    async def trace(self, event_name: str, info: dict[str, Any]) -> None:
        """Handle an httpcore trace event.

        Passed to requests as the ``trace`` extension. Events without a
        phase boundary are ignored.
        """
        if event_name == _TLS_STARTED:
            self.tls_started()
        elif event_name in _TLS_FINISHED:
            self.tls_done()
        elif event_name in _REQUEST_HEADERS_STARTED:
            self.connection_acquired()
        elif event_name in _RESPONSE_HEADERS_COMPLETE:
            self.first_byte()
