"""Shared test fixtures for httping tests."""

import asyncio
import contextlib
import socket
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from typer.testing import CliRunner


def response_bytes(
    body: bytes = b"pong",
    status: str = "200 OK",
    headers: list[str] | None = None,
    content_length: int | None = None,
) -> bytes:
    """Build a raw HTTP/1.1 response."""
    length = len(body) if content_length is None else content_length
    lines = [f"HTTP/1.1 {status}", f"Content-Length: {length}", *(headers or [])]
    return ("\r\n".join(lines) + "\r\n\r\n").encode("ascii") + body


class LocalServer:
    """Minimal HTTP/1.1 server on 127.0.0.1.

    Modes:
        ok: answer every request on the connection with a short body
        redirect: answer with a 301 pointing elsewhere
        slow: never answer, wait for the client to hang up
        truncated: promise a longer body than is sent, then hang up
        split_headers: send the status line, pause, then the rest
    """

    def __init__(self) -> None:
        self.mode = "ok"
        self.header_pause = 0.3
        self.connections = 0
        self.requests: list[bytes] = []
        self._server: asyncio.Server | None = None

    @property
    def port(self) -> int:
        assert self._server is not None
        return self._server.sockets[0].getsockname()[1]

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.port}/"

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)

    async def stop(self) -> None:
        assert self._server is not None
        self._server.close()
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._server.wait_closed(), timeout=2)

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.connections += 1
        try:
            while True:
                try:
                    head = await reader.readuntil(b"\r\n\r\n")
                except (asyncio.IncompleteReadError, ConnectionError):
                    break
                self.requests.append(head)

                if self.mode == "slow":
                    with contextlib.suppress(TimeoutError, ConnectionError):
                        await asyncio.wait_for(reader.read(), timeout=5)
                    break
                if self.mode == "redirect":
                    writer.write(
                        response_bytes(
                            b"", status="301 Moved Permanently", headers=["Location: /elsewhere"]
                        )
                    )
                elif self.mode == "split_headers":
                    raw = response_bytes(b"pong")
                    status_line, _, rest = raw.partition(b"\r\n")
                    writer.write(status_line + b"\r\n")
                    await writer.drain()
                    await asyncio.sleep(self.header_pause)
                    writer.write(rest)
                elif self.mode == "truncated":
                    writer.write(response_bytes(b"pong", content_length=100))
                    await writer.drain()
                    break
                else:
                    writer.write(response_bytes(b"pong"))
                await writer.drain()
        finally:
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest_asyncio.fixture
async def local_server() -> AsyncGenerator[LocalServer, None]:
    """Start a local HTTP server for the duration of the test."""
    server = LocalServer()
    await server.start()
    try:
        yield server
    finally:
        await server.stop()


@pytest.fixture
def closed_port() -> int:
    """Return a local port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
