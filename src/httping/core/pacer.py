"""Pacing between consecutive requests."""

import asyncio
import logging

from .cancel import CancelToken

logger = logging.getLogger(__name__)


def compute_wait(last_total_ms: float, min_delay_ms: float) -> float:
    """Return how long to wait before the next request, in ms.

    The minimum delay is a cadence, not an extra sleep: time already
    spent on the previous request counts toward it.
    """
    return max(min_delay_ms - last_total_ms, 0.0)


class Pacer:
    """Keeps consecutive requests at least min_delay_ms apart."""

    def __init__(self, min_delay_ms: float) -> None:
        self.min_delay_ms = min_delay_ms

    def wait_for(self, last_total_ms: float) -> float:
        return compute_wait(last_total_ms, self.min_delay_ms)

    async def pause(self, last_total_ms: float, token: CancelToken) -> None:
        """Sleep until the next request is due.

        Args:
            last_total_ms: Total time of the request that just finished
            token: Run cancellation token

        Raises:
            RunCancelled: If the token fired before or during the wait
        """
        wait_ms = self.wait_for(last_total_ms)
        logger.debug(f"Next request in {wait_ms:.1f}ms")
        await token.race(asyncio.sleep(wait_ms / 1000.0))
