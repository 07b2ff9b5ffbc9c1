"""Freshness gate: time-windowed caching in front of every fetch entry point.

Each data class (``weather:<city>``, ``aiSummary:short:<city>``, ...) moves
through Empty -> Fresh -> Stale -> Fresh. A fresh record is served without
calling the fetcher. Stale or empty records trigger a fetch whose result
replaces the record in one step. Failures leave the record untouched and
surface a FetchError carrying the last-known-good payload.

Concurrent requests for the same class share one in-flight fetch. A fetch
whose generation token was bumped by ``cancel()`` or ``invalidate()``
completes for its waiters but does not write the record.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from skylar.errors import FetchError
from skylar.ingest.staleness import age_seconds, is_stale
from skylar.models.freshness import FreshnessRecord, FreshnessState, FreshnessStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_WINDOWS: dict[str, float] = {
    "weather": 5 * 60,
    "aiSummary:short": 60 * 60,
    "aiSummary:detail": 2 * 60 * 60,
}
DEFAULT_FETCH_TIMEOUT = 30.0


class FreshnessGate:
    def __init__(
        self,
        windows: dict[str, float] | None = None,
        default_window: float | None = None,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.windows = dict(DEFAULT_WINDOWS if windows is None else windows)
        self.default_window = (
            default_window if default_window is not None
            else self.windows.get("weather", DEFAULT_WINDOWS["weather"])
        )
        self.fetch_timeout = fetch_timeout
        self._clock = clock
        self._records: dict[str, FreshnessRecord] = {}
        self._in_flight: dict[str, asyncio.Task] = {}
        self._generation: dict[str, int] = {}

    def window_for(self, data_class: str) -> float:
        """Exact match first, then the longest configured prefix before a ':'."""
        if data_class in self.windows:
            return self.windows[data_class]
        matches = [k for k in self.windows if data_class.startswith(k + ":")]
        if matches:
            return self.windows[max(matches, key=len)]
        return self.default_window

    def state(self, data_class: str) -> FreshnessState:
        record = self._records.get(data_class)
        if record is None:
            return FreshnessState.EMPTY
        if is_stale(record.fetched_at, self.window_for(data_class), self._clock()):
            return FreshnessState.STALE
        return FreshnessState.FRESH

    def peek(self, data_class: str) -> Any:
        """Last-known-good payload, fresh or not. None when never fetched."""
        record = self._records.get(data_class)
        return record.payload if record is not None else None

    def record(self, data_class: str) -> FreshnessRecord | None:
        return self._records.get(data_class)

    def age(self, data_class: str) -> float | None:
        record = self._records.get(data_class)
        if record is None:
            return None
        return age_seconds(record.fetched_at, self._clock())

    def is_in_flight(self, data_class: str) -> bool:
        return data_class in self._in_flight

    def status(self, data_class: str) -> FreshnessStatus:
        return FreshnessStatus(
            data_class=data_class,
            state=self.state(data_class),
            age_seconds=self.age(data_class),
            window_seconds=self.window_for(data_class),
            in_flight=self.is_in_flight(data_class),
        )

    def snapshot(self) -> list[FreshnessStatus]:
        classes = sorted(set(self._records) | set(self._in_flight))
        return [self.status(c) for c in classes]

    async def get(
        self,
        data_class: str,
        fetch: Callable[[], Awaitable[T]],
        cacheable: Callable[[T], bool] | None = None,
    ) -> T:
        """Return the cached payload while fresh, otherwise fetch.

        `cacheable` can veto storing a successful but incomplete payload; it
        is still returned to the caller.
        """
        if self.state(data_class) == FreshnessState.FRESH:
            logger.debug("Serving %s from cache", data_class)
            return self._records[data_class].payload
        return await self._fetch(data_class, fetch, cacheable)

    async def refresh(
        self,
        data_class: str,
        fetch: Callable[[], Awaitable[T]],
        cacheable: Callable[[T], bool] | None = None,
    ) -> T:
        """Force a fetch regardless of state. Failure keeps the old payload."""
        return await self._fetch(data_class, fetch, cacheable)

    def cancel(self, data_class: str) -> None:
        """Mark any in-flight fetch for this class as obsolete.

        The fetch still completes for callers already waiting on it, but it
        will not write the record, and the next request starts a new fetch.
        """
        self._generation[data_class] = self._generation.get(data_class, 0) + 1
        self._in_flight.pop(data_class, None)

    def invalidate(self, data_class: str) -> None:
        """Drop the cached record and make any in-flight fetch obsolete."""
        self.cancel(data_class)
        if self._records.pop(data_class, None) is not None:
            logger.info("Invalidated %s", data_class)

    async def _fetch(
        self,
        data_class: str,
        fetch: Callable[[], Awaitable[T]],
        cacheable: Callable[[T], bool] | None,
    ) -> T:
        task = self._in_flight.get(data_class)
        if task is None:
            task = asyncio.create_task(self._run(data_class, fetch, cacheable))
            task.add_done_callback(_retrieve_exception)
            self._in_flight[data_class] = task
        else:
            logger.debug("Joining in-flight fetch for %s", data_class)
        # A cancelled caller stops waiting; the fetch carries on for the rest.
        return await asyncio.shield(task)

    async def _run(
        self,
        data_class: str,
        fetch: Callable[[], Awaitable[T]],
        cacheable: Callable[[T], bool] | None,
    ) -> T:
        token = self._generation.get(data_class, 0)
        try:
            payload = await asyncio.wait_for(fetch(), timeout=self.fetch_timeout)
        except Exception as e:
            if isinstance(e, TimeoutError):
                logger.warning(
                    "Fetch for %s timed out after %.1fs", data_class, self.fetch_timeout
                )
            raise FetchError(data_class, e, cached=self.peek(data_class)) from e
        else:
            if self._generation.get(data_class, 0) != token:
                logger.info("Discarding obsolete fetch result for %s", data_class)
            elif cacheable is not None and not cacheable(payload):
                logger.info("Not caching incomplete result for %s", data_class)
            else:
                self._records[data_class] = FreshnessRecord(
                    data_class=data_class, fetched_at=self._clock(), payload=payload
                )
            return payload
        finally:
            if self._in_flight.get(data_class) is asyncio.current_task():
                del self._in_flight[data_class]


def _retrieve_exception(task: asyncio.Task) -> None:
    # Every waiter may have gone away; mark the failure as seen.
    if not task.cancelled():
        task.exception()
