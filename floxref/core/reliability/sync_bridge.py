"""
Synchronous boundary adapter — run a coroutine from synchronous code.

Shell-completion hooks are plain functions, but the match resolver is
async.  ``run_blocking`` dispatches the coroutine to a dedicated worker
thread with its own event loop and blocks the caller until it finishes
or the timeout elapses.

There is no cancellation: on timeout the worker is abandoned and left
to finish in the background, and the caller gets ``default``.  The
worker is a daemon thread so an abandoned call never holds up process
exit.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SENTINEL: Any = object()


class BoundaryTimeout(TimeoutError):
    """The worker did not finish within the allowed time."""


def run_blocking(
    coro_factory: Callable[[], Awaitable[T]],
    timeout: float | None = None,
    default: T = _SENTINEL,
) -> T:
    """Run ``coro_factory()`` on a worker thread and wait for its result.

    Args:
        coro_factory: Zero-argument callable returning the awaitable. It is
            invoked on the worker so the coroutine binds to the worker's loop.
        timeout: Seconds to wait (None = wait forever).
        default: Value returned on timeout. When omitted, a timeout raises
            ``BoundaryTimeout`` instead.

    Returns:
        The coroutine's result.

    Raises:
        BoundaryTimeout: On timeout when no default was given.
        Exception: Whatever the coroutine raised, unchanged.
    """
    future: concurrent.futures.Future[T] = concurrent.futures.Future()

    async def _runner() -> T:
        return await coro_factory()

    def _work() -> None:
        try:
            result = asyncio.run(_runner())
        except BaseException as e:  # handed to the waiting caller
            future.set_exception(e)
        else:
            future.set_result(result)

    worker = threading.Thread(target=_work, name="floxref-boundary", daemon=True)
    worker.start()

    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError:
        if future.done():
            # Finished after all, or the coroutine raised TimeoutError itself.
            return future.result()
        logger.debug("Boundary call exceeded %ss, abandoning worker", timeout)
        if default is _SENTINEL:
            raise BoundaryTimeout(f"Timed out after {timeout}s") from None
        return default
