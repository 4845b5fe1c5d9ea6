"""Periodic refresh of a list view, bound to the lifetime of the viewing session."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, Set, TypeVar

from schoolms.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollectionPoller(Generic[T]):
    """Re-fetch a collection every `interval` seconds.

    Each tick starts a refresh without waiting for the previous one, so a slow
    response can land after a newer one; whichever completes last is kept in
    `latest`. Leaving the context (or calling stop) cancels the timer and every
    refresh still in flight.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        interval: Optional[float] = None,
        on_result: Optional[Callable[[T], Any]] = None,
        fetch_immediately: bool = True,
    ) -> None:
        self.fetch = fetch
        self.interval = interval if interval is not None else settings.poll_interval_seconds
        self.on_result = on_result
        self.fetch_immediately = fetch_immediately
        self.latest: Optional[T] = None
        self.refresh_count = 0
        self._timer: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def __aenter__(self) -> "CollectionPoller[T]":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    def start(self) -> None:
        if self.running:
            return
        self._timer = asyncio.create_task(self._run())

    async def stop(self) -> None:
        tasks = list(self._inflight)
        if self._timer is not None:
            tasks.append(self._timer)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._timer = None
        self._inflight.clear()

    def refresh_now(self) -> asyncio.Task:
        """Fire one refresh outside the timer."""
        task = asyncio.create_task(self._refresh())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _run(self) -> None:
        if self.fetch_immediately:
            self.refresh_now()
        while True:
            await asyncio.sleep(self.interval)
            self.refresh_now()

    async def _refresh(self) -> None:
        try:
            result = await self.fetch()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Poll refresh failed: %s", e)
            return
        self.latest = result
        self.refresh_count += 1
        if self.on_result is None:
            return
        try:
            self.on_result(result)
        except Exception as e:
            logger.warning("Poll result handler failed: %s", e)
