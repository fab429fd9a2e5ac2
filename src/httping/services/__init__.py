"""External service integrations for httping.

- transport: Connection pool and the timed network backend
"""

from .transport import (
    ConnectObserver,
    TimedNetworkBackend,
    active_timer,
    create_connection_pool,
)

__all__ = [
    "ConnectObserver",
    "TimedNetworkBackend",
    "active_timer",
    "create_connection_pool",
]
