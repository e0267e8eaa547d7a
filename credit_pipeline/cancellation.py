"""Cancellation handle propagated through every suspension point of a job."""
from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


class OperationCancelled(Exception):
    """A cancellation-aware wait was interrupted by its caller."""

    def __init__(self, message: str = "Operation cancelled by caller") -> None:
        super().__init__(message)


class CancellationToken:
    """One-shot cancellation flag shared by a job and the calls it makes.

    Waiters race their awaitable against the flag; a tripped token makes the
    pending wait fail fast with OperationCancelled.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Cancelled by caller") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled(self.reason or "Cancelled by caller")

    async def sleep(self, delay_s: float) -> None:
        """Sleep for delay_s unless cancelled first."""
        self.raise_if_cancelled()
        if delay_s <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay_s)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()

    async def run(self, aw: Awaitable[T], *, timeout_s: float | None = None) -> T:
        """Await aw, aborting it if the token trips. Raises asyncio.TimeoutError past timeout_s."""
        if self.cancelled:
            if asyncio.iscoroutine(aw):
                aw.close()
            self.raise_if_cancelled()
        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=timeout_s,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()
        if task in done:
            return task.result()
        task.cancel()
        try:
            await task
        except (asyncio.CancelledError, Exception):  # noqa: BLE001
            pass
        if waiter in done:
            raise OperationCancelled(self.reason or "Cancelled by caller")
        raise asyncio.TimeoutError()
