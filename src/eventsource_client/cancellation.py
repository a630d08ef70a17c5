"""Replaceable cancellation handle for the reconnect loop.

A token is cancelled at most once. Coroutines run through ``run()`` are
wrapped in tasks that the token cancels. The awaiting side sees
TransportCancelled; cancelling the awaiting task itself still raises
CancelledError.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Coroutine, TypeVar

from .errors import TransportCancelled

T = TypeVar("T")


def _cancel_task(task: asyncio.Task[Any]) -> None:
    loop = task.get_loop()
    if loop.is_closed():
        return
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        task.cancel()
    else:
        loop.call_soon_threadsafe(task.cancel)


class CancellationToken:
    """Cancels the tasks started through it. Safe to cancel from any thread."""

    def __init__(self) -> None:
        self._cancelled = False
        self._tasks: set[asyncio.Task[Any]] = set()
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            tasks = list(self._tasks)
            self._tasks.clear()
        for task in tasks:
            _cancel_task(task)

    async def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Await ``coro`` until it finishes or this token is cancelled.

        Raises:
            TransportCancelled: the token was cancelled before or while
                the coroutine was running.
        """
        if self._cancelled:
            coro.close()
            raise TransportCancelled("operation cancelled before it started")

        task = asyncio.ensure_future(coro)
        with self._lock:
            if self._cancelled:
                task.cancel()
            else:
                self._tasks.add(task)
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # Let the inner task finish its cleanup before unwinding.
            task.cancel()
            await asyncio.wait({task})
            if not task.cancelled():
                task.exception()
            raise
        finally:
            with self._lock:
                self._tasks.discard(task)

        if task.cancelled():
            raise TransportCancelled("operation cancelled")
        if self._cancelled and task.exception() is not None:
            raise TransportCancelled("operation cancelled") from task.exception()
        return task.result()

    async def sleep(self, delay: float) -> bool:
        """Sleep for ``delay`` seconds. Returns False if cancelled first."""
        try:
            await self.run(asyncio.sleep(delay))
        except TransportCancelled:
            return False
        return True


class TokenSlot:
    """Mutex-guarded slot holding the current CancellationToken."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._token = CancellationToken()

    @property
    def current(self) -> CancellationToken:
        with self._lock:
            return self._token

    def swap_and_cancel(self) -> CancellationToken:
        """Install a fresh token and cancel the one it replaces. Returns the new token."""
        fresh = CancellationToken()
        with self._lock:
            old, self._token = self._token, fresh
        old.cancel()
        return fresh
