import asyncio
import time
from typing import Awaitable, Optional, TypeVar

from .errors import Cancelled

T = TypeVar("T")


class CancelToken:
    """
    Cancellation signal handed down from the query layer and through every store call.
    It's an explicit value instead of relying on task cancellation alone, so stores
    backed by thread pools or other schedulers can poll `cancelled` too.

    An optional `timeout` (seconds) arms a deadline counted from creation; once it
    passes the token reports itself cancelled.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._event = asyncio.Event()
        self._deadline = None if timeout is None else time.monotonic() + timeout
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "Resolution was cancelled") -> None:
        if self.reason is None:
            self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("Resolution exceeded its deadline")
            return True
        return False

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise Cancelled(self.reason or "Resolution was cancelled")

    async def wait(self) -> None:
        if self._deadline is None:
            await self._event.wait()
            return
        remaining = max(self._deadline - time.monotonic(), 0)
        try:
            await asyncio.wait_for(self._event.wait(), remaining)
        except asyncio.TimeoutError:
            self.cancel("Resolution exceeded its deadline")

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await `awaitable` unless the token fires first. In that case the pending work
        is cancelled and awaited, so any connection it holds is released before
        `Cancelled` is raised.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise Cancelled(self.reason or "Resolution was cancelled")
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
        if task.cancelled():
            raise Cancelled(self.reason or "Resolution was cancelled")
        return task.result()
