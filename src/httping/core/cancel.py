"""One-shot cancellation shared by the suspension points of a run."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from ..errors import RunCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelToken:
    """Cancellation signal for a single run.

    Fired once by the interrupt listener and never reset. Work that must
    stop promptly on cancellation is awaited through race().
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        """True once cancel() has been called."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Fire the token. Calling it again has no effect."""
        if not self._event.is_set():
            logger.debug("Cancellation requested")
        self._event.set()

    async def wait(self) -> None:
        """Block until the token fires."""
        await self._event.wait()

    async def race(self, aw: Awaitable[T]) -> T:
        """Await aw unless the token fires first.

        Args:
            aw: Awaitable to run

        Returns:
            Result of aw

        Raises:
            RunCancelled: If the token fired before or while aw ran. aw is
                cancelled and awaited before this is raised.
        """
        task = asyncio.ensure_future(aw)
        if self.cancelled:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            raise RunCancelled()

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task.done():
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise RunCancelled()
