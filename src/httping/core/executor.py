"""Single instrumented HTTP request.

One execution is one GET: redirects are reported, never followed, and
the body is read only to time its download.
"""

import asyncio
import logging
from dataclasses import dataclass
from http import HTTPStatus
from urllib.parse import quote, urlsplit, urlunsplit

import httpcore

from ..config import HttpingConfig
from ..errors import TransportError, normalize_error_message
from ..models import TimingRecord
from ..services.transport import active_timer, create_connection_pool
from .cancel import CancelToken
from .phase_timer import PhaseTimer

logger = logging.getLogger(__name__)

METHOD = "GET"

# Characters left as they are when percent-encoding the path and the query
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = _PATH_SAFE + "?"

_DEFAULT_PORTS = {b"http": 80, b"https": 443}

# Failures of a single request; everything else is a bug and propagates.
# ValueError covers URLs httpcore cannot route, e.g. a missing host.
_TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    httpcore.NetworkError,
    httpcore.TimeoutException,
    httpcore.ProtocolError,
    httpcore.UnsupportedProtocol,
    httpcore.ProxyError,
    OSError,
    ValueError,
)


@dataclass(frozen=True)
class RequestOutcome:
    """Result of one request: the timings and the failure, if any."""

    record: TimingRecord
    error: TransportError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> str | None:
        """Failure description without the request prefix."""
        if self.error is None:
            return None
        return normalize_error_message(str(self.error))


def build_headers(config: HttpingConfig) -> list[tuple[str, str]]:
    """Request headers for every request of a run."""
    headers = [("User-Agent", config.user_agent), ("Accept", "*/*")]
    if not config.disable_compression:
        headers.append(("Accept-Encoding", "gzip"))
    return headers


def encode_url(url: str) -> bytes:
    """Return url in the ASCII form sent on the wire.

    The host is IDNA-encoded and the path and query are percent-encoded
    as UTF-8. Existing escapes are kept and the fragment is dropped.

    Raises:
        UnicodeError: If the host is not a valid IDNA name or another
            part still holds non-ASCII characters
        ValueError: If the URL cannot be split, e.g. a malformed port
    """
    parts = urlsplit(url)
    netloc = parts.netloc
    host = parts.hostname
    if host and not host.isascii():
        userinfo, _, _ = netloc.rpartition("@")
        port = f":{parts.port}" if parts.port is not None else ""
        netloc = host.encode("idna").decode("ascii") + port
        if userinfo:
            netloc = f"{userinfo}@{netloc}"
    path = quote(parts.path, safe=_PATH_SAFE)
    query = quote(parts.query, safe=_QUERY_SAFE)
    return urlunsplit((parts.scheme, netloc, path, query, "")).encode("ascii")


def protocol_label(http_version: bytes) -> str:
    """Label for the negotiated HTTP version, ``HTTP/1.1`` or ``HTTP/2.0``."""
    label = http_version.decode("ascii")
    if label == "HTTP/2":
        return "HTTP/2.0"
    return label


def _host_header(url: httpcore.URL) -> bytes:
    host = b"[" + url.host + b"]" if b":" in url.host else url.host
    if url.port is None or url.port == _DEFAULT_PORTS.get(url.scheme):
        return host
    return host + b":" + str(url.port).encode("ascii")


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _status_line(status: int, reason: bytes | None) -> str:
    phrase = reason.decode("ascii", errors="replace") if reason else ""
    if not phrase:
        try:
            phrase = HTTPStatus(status).phrase
        except ValueError:
            return str(status)
    return f"{status} {phrase}"


class RequestExecutor:
    """Issues instrumented requests over one connection pool."""

    def __init__(
        self,
        config: HttpingConfig,
        pool: httpcore.AsyncConnectionPool | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            config: Run configuration
            pool: Connection pool to use (created from config if omitted)
        """
        self._timeout = config.timeout_ms / 1000.0
        self._timeout_ms = config.timeout_ms
        self._headers = build_headers(config)
        self._pool = pool if pool is not None else create_connection_pool(config)

    async def aclose(self) -> None:
        """Close pooled connections."""
        await self._pool.aclose()

    async def execute(self, url: str, token: CancelToken) -> RequestOutcome:
        """Send one GET request to url and time its phases.

        The record's total is set however the request ends.

        Args:
            url: Target URL
            token: Run cancellation token

        Returns:
            The timings, plus the failure if the request did not complete

        Raises:
            RunCancelled: If the token fired before or during the request
        """
        record = TimingRecord()
        with PhaseTimer(record) as timer:
            try:
                await token.race(self._send(url, timer))
            except TransportError as e:
                logger.debug(f"Request failed: {e}")
                return RequestOutcome(record=record, error=e)
        return RequestOutcome(record=record)

    async def _send(self, url: str, timer: PhaseTimer) -> None:
        try:
            async with asyncio.timeout(self._timeout):
                await self._round_trip(url, timer)
        except TimeoutError as e:
            raise TransportError(
                METHOD, url, f"timeout exceeded after {self._timeout_ms}ms"
            ) from e

    def _build_request(self, url: str, timer: PhaseTimer) -> httpcore.Request:
        try:
            target = httpcore.URL(encode_url(url))
            return httpcore.Request(
                METHOD,
                target,
                headers=[("Host", _host_header(target)), *self._headers],
                extensions={"trace": timer.trace},
            )
        except (TypeError, ValueError) as e:
            # httpcore rejects non-ASCII URL parts and header values with TypeError
            raise TransportError(METHOD, url, f"invalid request: {_describe(e)}") from e

    async def _round_trip(self, url: str, timer: PhaseTimer) -> None:
        request = self._build_request(url, timer)
        # Runs in its own task, so the timer is visible only to this request
        active_timer.set(timer)
        try:
            response = await self._pool.handle_async_request(request)
            try:
                # No-op when the first byte was already seen
                timer.first_byte()
                timer.record.protocol = protocol_label(
                    response.extensions.get("http_version", b"HTTP/1.1")
                )
                timer.record.status = _status_line(
                    response.status, response.extensions.get("reason_phrase")
                )

                timer.download_started()
                async for _ in response.aiter_stream():
                    pass
                timer.download_done()
            finally:
                await response.aclose()
        except _TRANSPORT_ERRORS as e:
            raise TransportError(METHOD, url, _describe(e)) from e
