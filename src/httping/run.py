"""Run lifecycle for httping.

Wires the connection pool, executor and run loop for one run, and
installs the interrupt listener that stops the loop on Ctrl+C.
"""

import asyncio
import logging
import signal
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from types import FrameType

from .config import HttpingConfig
from .core import RequestExecutor, RunLoop, RunState
from .core.loop import Executor, Reporter

logger = logging.getLogger(__name__)


@contextmanager
def interrupt_listener(stop: Callable[[], None]) -> Iterator[None]:
    """Call stop on SIGINT while the context is active.

    Must be entered from a coroutine running on the event loop. Uses the
    loop's signal handler where the platform supports it, otherwise a
    plain signal handler that hands the call over to the loop. The
    previous handler is restored on exit.
    """
    loop = asyncio.get_running_loop()

    def _handle_interrupt(signum: int, frame: FrameType | None) -> None:
        loop.call_soon_threadsafe(stop)

    original_handler = None
    try:
        loop.add_signal_handler(signal.SIGINT, stop)
        on_loop = True
    except NotImplementedError:
        # Windows event loops have no signal handler support
        original_handler = signal.signal(signal.SIGINT, _handle_interrupt)
        on_loop = False

    try:
        yield
    finally:
        if on_loop:
            loop.remove_signal_handler(signal.SIGINT)
        else:
            signal.signal(signal.SIGINT, original_handler or signal.SIG_DFL)


async def ping(
    config: HttpingConfig,
    reporter: Reporter,
    executor: Executor | None = None,
    handle_interrupt: bool = True,
) -> RunState:
    """Probe config.url until the count is reached or the run is interrupted.

    Args:
        config: Run configuration
        reporter: Receives every counted attempt
        executor: Request executor (one over a fresh pool if omitted)
        handle_interrupt: Stop the run on SIGINT

    Returns:
        Counters and statistics of the run
    """
    owned: RequestExecutor | None = None
    if executor is None:
        executor = owned = RequestExecutor(config)
    run_loop = RunLoop(config, executor, reporter)

    logger.debug(
        f"Probing {config.url} (count={config.count or 'unbounded'}, "
        f"delay={config.delay_ms}ms, timeout={config.timeout_ms}ms)"
    )
    try:
        if not handle_interrupt:
            return await run_loop.run()
        with interrupt_listener(run_loop.stop):
            return await run_loop.run()
    finally:
        if owned is not None:
            await owned.aclose()
