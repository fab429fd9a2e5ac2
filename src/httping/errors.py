"""Errors raised by httping."""


class HttpingError(Exception):
    """Base exception for httping errors."""


class ConfigError(HttpingError):
    """Raised when configuration cannot be loaded or is invalid."""


class RunCancelled(HttpingError):
    """Raised when the run is interrupted at a suspension point."""


class TransportError(HttpingError):
    """A single request failed before or while transferring the response.

    Rendered the way request errors usually read, with the request
    description first: ``Get "https://example.com/": <reason>``.

    Attributes:
        method: HTTP method of the failed request
        url: Target URL of the failed request
        reason: Underlying failure description
    """

    def __init__(self, method: str, url: str, reason: str) -> None:
        self.method = method
        self.url = url
        self.reason = reason
        super().__init__(f'{method.title()} "{url}": {reason}')


def normalize_error_message(message: str) -> str:
    """Strip the request description from a request error message.

    ``Get "https://example.com/": dial tcp: no such host`` becomes
    ``dial tcp: no such host``. Only messages starting with ``Get `` are
    touched, and the split happens on the first ``": "``, so a URL that
    itself contains that sequence is cut short.

    Args:
        message: Error message as produced by the transport

    Returns:
        The message without its request prefix
    """
    if not message.startswith("Get "):
        return message
    _, sep, rest = message.partition(": ")
    if not sep:
        return message
    return rest
