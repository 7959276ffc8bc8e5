"""Per-invocation cancellation signal.

A CancellationToken is created for every tool run. Network awaits are
wrapped with `guard()` so that cancelling the token aborts the in-flight
request instead of waiting for it to finish.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from core.errors import OperationCancelledError

T = TypeVar("T")


class CancellationToken:
    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Operation cancelled")

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await `awaitable`, aborting it as soon as the token is cancelled."""
        self.raise_if_cancelled()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            # Consumer task went away: abort the request with it.
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        raise OperationCancelledError("Operation cancelled")
