"""Connection pool and timed network backend for httping.

httpcore resolves and connects inside its network backend, so the backend
is where DNS and TCP connect boundaries can be observed. The wrapper below
resolves the host itself, reports both phases to the timer of the request
in flight, then hands the resolved address to the real backend. The
streams it returns report the first response byte read off the socket.
"""

import ipaddress
import logging
import socket
import ssl
from collections.abc import Iterable
from contextvars import ContextVar
from typing import Any, Protocol

import anyio
import httpcore

from ..config import HttpingConfig

logger = logging.getLogger(__name__)

# (level, option, value) tuples as accepted by socket.setsockopt
SocketOption = tuple[Any, ...]


class ConnectObserver(Protocol):
    """Receives the DNS, connect and first-byte boundaries of a request."""

    def dns_started(self) -> None: ...

    def dns_done(self) -> None: ...

    def connect_started(self) -> None: ...

    def connect_done(self) -> None: ...

    def first_byte(self) -> None: ...


# Observer of the request running in the current task
active_timer: ContextVar[ConnectObserver | None] = ContextVar("active_timer", default=None)


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


class TimedNetworkStream(httpcore.AsyncNetworkStream):
    """Network stream reporting the first response byte to the active timer.

    The timer is looked up on every read, so a pooled connection reports
    to whichever request is using it.
    """

    def __init__(self, stream: httpcore.AsyncNetworkStream) -> None:
        self._stream = stream

    async def read(self, max_bytes: int, timeout: float | None = None) -> bytes:
        data = await self._stream.read(max_bytes, timeout=timeout)
        if data:
            timer = active_timer.get()
            if timer is not None:
                timer.first_byte()
        return data

    async def write(self, buffer: bytes, timeout: float | None = None) -> None:
        await self._stream.write(buffer, timeout=timeout)

    async def aclose(self) -> None:
        await self._stream.aclose()

    async def start_tls(
        self,
        ssl_context: ssl.SSLContext,
        server_hostname: str | None = None,
        timeout: float | None = None,
    ) -> httpcore.AsyncNetworkStream:
        # Handshake reads happen below this wrapper and are not response bytes
        stream = await self._stream.start_tls(
            ssl_context, server_hostname=server_hostname, timeout=timeout
        )
        return TimedNetworkStream(stream)

    def get_extra_info(self, info: str) -> Any:
        return self._stream.get_extra_info(info)


class TimedNetworkBackend(httpcore.AsyncNetworkBackend):
    """Network backend reporting DNS and connect timings to the active timer."""

    def __init__(self, backend: httpcore.AsyncNetworkBackend | None = None) -> None:
        self._backend = backend or httpcore.AnyIOBackend()

    async def _resolve(self, host: str, port: int) -> list[str]:
        timer = active_timer.get()
        if timer is not None:
            timer.dns_started()
        try:
            infos = await anyio.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        except socket.gaierror as e:
            raise httpcore.ConnectError(f"lookup {host}: {e.strerror or e}") from e
        finally:
            if timer is not None:
                timer.dns_done()

        addresses: list[str] = []
        for *_, sockaddr in infos:
            address = str(sockaddr[0])
            if address not in addresses:
                addresses.append(address)
        logger.debug(f"Resolved {host} to {', '.join(addresses)}")
        return addresses

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: float | None = None,
        local_address: str | None = None,
        socket_options: Iterable[SocketOption] | None = None,
    ) -> httpcore.AsyncNetworkStream:
        addresses = [host] if _is_ip_literal(host) else await self._resolve(host, port)
        # The iterable may be a generator and is needed once per attempt
        options = list(socket_options) if socket_options is not None else None

        timer = active_timer.get()
        if timer is not None:
            timer.connect_started()
        try:
            last_error: Exception | None = None
            for address in addresses:
                try:
                    stream = await self._backend.connect_tcp(
                        address,
                        port,
                        timeout=timeout,
                        local_address=local_address,
                        socket_options=options,
                    )
                except (httpcore.ConnectError, httpcore.ConnectTimeout) as e:
                    logger.debug(f"Connect to {address}:{port} failed: {e}")
                    last_error = e
                    continue
                logger.debug(f"Connected to {address}:{port}")
                return TimedNetworkStream(stream)
            if last_error is None:
                raise httpcore.ConnectError(f"lookup {host}: no addresses found")
            raise last_error
        finally:
            if timer is not None:
                timer.connect_done()

    async def connect_unix_socket(
        self,
        path: str,
        timeout: float | None = None,
        socket_options: Iterable[SocketOption] | None = None,
    ) -> httpcore.AsyncNetworkStream:
        return await self._backend.connect_unix_socket(
            path, timeout=timeout, socket_options=socket_options
        )

    async def sleep(self, seconds: float) -> None:
        await self._backend.sleep(seconds)


def create_connection_pool(
    config: HttpingConfig,
    network_backend: httpcore.AsyncNetworkBackend | None = None,
) -> httpcore.AsyncConnectionPool:
    """Create the connection pool shared by every request of a run.

    Without keep-alive no idle connection is retained, so each request
    dials a fresh one.

    Args:
        config: Run configuration
        network_backend: Backend to wrap with timing (defaults to anyio)

    Returns:
        Connection pool; the caller closes it when the run ends
    """
    return httpcore.AsyncConnectionPool(
        http1=True,
        http2=not config.disable_http2,
        max_keepalive_connections=None if config.keep_alive else 0,
        retries=0,
        network_backend=TimedNetworkBackend(network_backend),
    )
