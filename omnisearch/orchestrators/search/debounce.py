"""Debouncer: coalesce bursts of calls into one delayed coroutine run.

Each call cancels the pending timer and starts a new one with the latest
arguments. Every caller in a burst gets a future that resolves with the
result of the single run the burst collapsed into.
"""

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any


class Debouncer:
    def __init__(self, func: Callable[..., Awaitable[Any]], delay: float) -> None:
        self._func = func
        self._delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._args: tuple[Any, ...] = ()
        self._waiters: list[asyncio.Future] = []
        self._running: set[asyncio.Task] = set()
        self.disposed = False

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any, delay: float | None = None) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()
        if self.disposed:
            waiter.set_result(None)
            return waiter
        if self._handle is not None:
            self._handle.cancel()
        self._args = args
        self._waiters.append(waiter)
        wait = self._delay if delay is None else delay
        self._handle = loop.call_later(max(0.0, wait), self._fire)
        return waiter

    def _fire(self) -> None:
        self._handle = None
        waiters, self._waiters = self._waiters, []
        task = asyncio.ensure_future(self._func(*self._args))
        self._running.add(task)
        task.add_done_callback(partial(self._settle, waiters))

    def _settle(self, waiters: list[asyncio.Future], task: asyncio.Task) -> None:
        self._running.discard(task)
        for waiter in waiters:
            if waiter.done():
                continue
            if task.cancelled():
                waiter.cancel()
            elif task.exception() is not None:
                waiter.set_exception(task.exception())
            else:
                waiter.set_result(task.result())

    def cancel(self) -> None:
        """Drop the pending run. Its callers resolve with None."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    def dispose(self) -> None:
        """Cancel the pending run. Runs already started finish on their own."""
        self.disposed = True
        self.cancel()
