"""
Cooperative cancellation for in-flight queries.

When a newer mood selection supersedes an older one, the session cancels the older
query's token. Awaitables wrapped with `run_cancellable` are then abandoned and raise
`QueryCancelled`, so a stale fetch can never overwrite a newer result.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
from typing import Awaitable, TypeVar

from moodspot.domain.errors import QueryCancelled

T = TypeVar("T")


class CancelToken:
    """One-shot abort flag for a single query."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "superseded") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise QueryCancelled(self.reason or "cancelled")

    async def wait(self) -> None:
        await self._event.wait()


async def run_cancellable(awaitable: Awaitable[T], token: CancelToken | None) -> T:
    """Await `awaitable`, abandoning it as soon as `token` is cancelled."""
    if token is None:
        return await awaitable
    if token.cancelled:
        # never scheduled; close it so it is not reported as un-awaited
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        token.raise_if_cancelled()

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        waiter.cancel()
        raise

    if work in done:
        waiter.cancel()
        return work.result()

    work.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await work
    raise QueryCancelled(token.reason or "cancelled")
