"""Timing model for per-phase request measurements."""

from pydantic import BaseModel, Field


class TimingRecord(BaseModel):
    """Per-request timing breakdown.

    Every optional field is either a measured value or None. Zero is a
    valid duration and never stands in for "unknown".

    Attributes:
        dns_ms: Host name resolution time
        connect_ms: TCP connect time
        tls_ms: TLS handshake time
        ttfb_ms: Time from request start to the first response byte
        download_ms: Time to drain the body after the headers arrived
        total_ms: Time from request start until success or failure
        reused: Whether the request ran on a pooled connection
        protocol: Negotiated HTTP version
        status: Status code and reason phrase
    """

    dns_ms: float | None = Field(default=None, description="DNS resolution time in ms")
    connect_ms: float | None = Field(default=None, description="TCP connect time in ms")
    tls_ms: float | None = Field(default=None, description="TLS handshake time in ms")
    ttfb_ms: float | None = Field(default=None, description="Time to first byte in ms")
    download_ms: float | None = Field(default=None, description="Body download time in ms")
    total_ms: float | None = Field(default=None, description="Total request time in ms")
    reused: bool | None = Field(default=None, description="Connection was reused")
    protocol: str | None = Field(default=None, description="HTTP version, e.g. HTTP/1.1")
    status: str | None = Field(default=None, description="Status line, e.g. 200 OK")
