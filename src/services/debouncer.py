# src/services/debouncer.py

"""Coalesce rapid calls into one delayed effect on the running event loop."""

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger("pricefind.debounce")

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Wrap a single-argument effect so it fires ``wait`` seconds after
    the last call.

    Each call cancels the pending timer and re-arms it with the newest
    argument; earlier arguments are dropped, never queued.  At most one
    timer is live per instance.  If the effect returns an awaitable it is
    scheduled as a task on the same loop.

    Calls must happen while an event loop is running.
    """

    def __init__(
        self,
        effect: Callable[[T], Any],
        wait: float,
    ) -> None:
        if wait < 0:
            raise ValueError("wait must be >= 0")
        self._effect = effect
        self._wait = wait
        self._handle: asyncio.TimerHandle | None = None
        self._pending_arg: T | None = None
        self._tasks: set[asyncio.Future[Any]] = set()

    @property
    def wait(self) -> float:
        return self._wait

    @property
    def pending(self) -> bool:
        """True while a scheduled invocation has not fired yet."""
        return self._handle is not None

    def __call__(self, arg: T) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        self._pending_arg = arg
        self._handle = loop.call_later(self._wait, self._fire)

    def cancel(self) -> bool:
        """Drop the pending invocation.  Returns True if one was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        self._pending_arg = None
        return True

    def flush(self) -> None:
        """Fire the pending invocation now instead of waiting."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._fire()

    async def drain(self) -> None:
        """Flush any pending call and wait for scheduled coroutines."""
        self.flush()
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _fire(self) -> None:
        self._handle = None
        arg = self._pending_arg
        self._pending_arg = None
        try:
            result = self._effect(arg)  # type: ignore[arg-type]
        except Exception:
            logger.error("Debounced effect raised", exc_info=True)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Future[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Debounced coroutine raised: %s", exc, exc_info=exc,
            )


def debounce(
    wait: float,
) -> Callable[[Callable[[T], Any]], Debouncer[T]]:
    """Decorator form: ``@debounce(0.3)`` turns a function into a Debouncer."""

    def wrap(func: Callable[[T], Any]) -> Debouncer[T]:
        return Debouncer(func, wait)

    return wrap
