"""Live subscription handles handed out by the connection manager.

A subscription is a per-subscriber FIFO filled by the manager while it holds
its own lock, and drained by the subscriber outside of it. Subscriber code
never runs inside the manager, so a subscriber may call back into it (for
example ``reset()`` or ``shutdown()``) without deadlocking.
"""

from __future__ import annotations

import asyncio
import queue
import threading
from collections import deque
from collections.abc import Callable
from contextlib import suppress
from types import TracebackType

from http_connectivity.errors import SubscriptionClosedError
from http_connectivity.status import ConnectionStatus, SubscriptionMode

_Waiter = tuple[asyncio.AbstractEventLoop, "asyncio.Future[None]"]


def _resolve(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)


def _wake(waiters: list[_Waiter]) -> None:
    for loop, waiter in waiters:
        # The subscriber's loop may already be closed.
        with suppress(RuntimeError):
            loop.call_soon_threadsafe(_resolve, waiter)


class StatusSubscription:
    """Ordered stream of statuses delivered to one subscriber.

    Supports blocking reads (``get``), non-blocking reads (``get_nowait``,
    ``drain``), plain iteration and ``async for`` iteration. Iteration ends
    once the subscription is closed and everything already delivered has
    been consumed.
    """

    def __init__(
        self,
        mode: SubscriptionMode,
        *,
        on_close: Callable[[StatusSubscription], None] | None = None,
    ) -> None:
        """Create an empty subscription.

        Args:
            mode: ``ALL`` delivers every report, ``CHANGES`` drops
                consecutive duplicates.
            on_close: Called once when the subscriber closes the handle.
        """
        self.mode = mode
        self._on_close = on_close
        self._condition = threading.Condition()
        self._pending: deque[ConnectionStatus] = deque()
        self._last_enqueued: ConnectionStatus | None = None
        self._closed = False
        self._async_waiters: list[_Waiter] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, status: ConnectionStatus) -> bool:
        """Enqueue one status; return whether it was accepted."""
        with self._condition:
            if self._closed:
                return False
            if self.mode is SubscriptionMode.CHANGES and status == self._last_enqueued:
                return False
            self._last_enqueued = status
            self._pending.append(status)
            self._condition.notify_all()
            waiters, self._async_waiters = self._async_waiters, []
        _wake(waiters)
        return True

    def _mark_closed(self) -> bool:
        with self._condition:
            if self._closed:
                return False
            self._closed = True
            self._condition.notify_all()
            waiters, self._async_waiters = self._async_waiters, []
        _wake(waiters)
        return True

    def close(self) -> None:
        """Stop delivery to this subscriber. Safe to call more than once."""
        if self._mark_closed() and self._on_close is not None:
            self._on_close(self)

    def terminate(self) -> None:
        """Close on behalf of the manager, without calling back into it."""
        self._mark_closed()

    def _pop_locked(self) -> ConnectionStatus:
        if self._pending:
            return self._pending.popleft()
        raise SubscriptionClosedError("subscription is closed")

    def get(self, timeout: float | None = None) -> ConnectionStatus:
        """Return the next status, blocking until one is delivered.

        Raises:
            queue.Empty: When ``timeout`` elapses with nothing delivered.
            SubscriptionClosedError: When closed and fully drained.
        """
        with self._condition:
            ready = self._condition.wait_for(
                lambda: bool(self._pending) or self._closed, timeout
            )
            if not ready:
                raise queue.Empty
            return self._pop_locked()

    def get_nowait(self) -> ConnectionStatus:
        """Return the next status without blocking."""
        with self._condition:
            if not self._pending and not self._closed:
                raise queue.Empty
            return self._pop_locked()

    def drain(self) -> list[ConnectionStatus]:
        """Return and remove every status delivered so far."""
        with self._condition:
            drained = list(self._pending)
            self._pending.clear()
            return drained

    def __iter__(self) -> StatusSubscription:
        return self

    def __next__(self) -> ConnectionStatus:
        try:
            return self.get()
        except SubscriptionClosedError:
            raise StopIteration from None

    def __aiter__(self) -> StatusSubscription:
        return self

    async def __anext__(self) -> ConnectionStatus:
        loop = asyncio.get_running_loop()
        while True:
            with self._condition:
                if self._pending:
                    return self._pending.popleft()
                if self._closed:
                    raise StopAsyncIteration
                waiter: asyncio.Future[None] = loop.create_future()
                entry = (loop, waiter)
                self._async_waiters.append(entry)
            try:
                await waiter
            finally:
                with self._condition:
                    if entry in self._async_waiters:
                        self._async_waiters.remove(entry)

    def __enter__(self) -> StatusSubscription:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    async def __aenter__(self) -> StatusSubscription:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
