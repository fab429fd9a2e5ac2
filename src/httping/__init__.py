"""httping: ping-style latency measurement for HTTP(S) endpoints."""

__version__ = "0.1.0"
