"""Concurrent fan-out of followings fetches across the requested users.

One fetch task per user runs on a thread pool. Each settled task pushes
its result onto a queue from the future's done-callback, so consumers see
results in completion order. The stream closes only after every task has
settled, whether it succeeded, failed or was cancelled.
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Dict, Iterator, List, Optional, Sequence

from cumuli.exceptions import FetchCancelled, FetchFailed
from cumuli.models import FetchFailure, StreamItem
from cumuli.network.fetcher import PaginatedFollowingsFetcher

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8

_CLOSED = object()


class Aggregation:
    """A running aggregation: a completion-ordered stream plus a done signal.

    Iterating yields FollowingsList or FetchFailure items and stops once
    every launched task has settled. Use as a context manager so that
    leaving early cancels the outstanding tasks and waits for them.
    """

    def __init__(self, users: Sequence[str], executor: ThreadPoolExecutor) -> None:
        self.users: List[str] = list(users)
        self.completed = threading.Event()
        self.cancel_event = threading.Event()
        self._executor = executor
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._lock = threading.Lock()
        self._remaining = len(self.users)
        self._futures: Dict[str, Future] = {}
        self._closed = False

    def _launch(self, fetcher: PaginatedFollowingsFetcher) -> None:
        if not self.users:
            self._close_stream()
            return
        for user in self.users:
            future = self._executor.submit(fetcher.fetch, user, self.cancel_event)
            self._futures[user] = future
            future.add_done_callback(partial(self._settle, user))

    def _settle(self, user: str, future: Future) -> None:
        """Done-callback: push the task's outcome, close after the last one."""
        if future.cancelled():
            item: StreamItem = FetchFailure(
                user, FetchFailed(user, FetchCancelled("Fetch cancelled before start"))
            )
        else:
            exc = future.exception()
            if exc is None:
                item = future.result()
            elif isinstance(exc, FetchFailed):
                item = FetchFailure(user, exc)
            else:
                item = FetchFailure(user, FetchFailed(user, exc))

        if isinstance(item, FetchFailure):
            logger.warning("Fetch for %s settled with failure: %s", user, item.error.details)

        self._queue.put(item)
        with self._lock:
            self._remaining -= 1
            last = self._remaining == 0
        if last:
            self._close_stream()

    def _close_stream(self) -> None:
        self._queue.put(_CLOSED)
        self.completed.set()
        logger.debug("Aggregation of %d users settled", len(self.users))

    def __iter__(self) -> Iterator[StreamItem]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                # Leave the marker for any other consumer
                self._queue.put(_CLOSED)
                return
            yield item

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Cancel outstanding fetches; each still settles onto the stream."""
        if self.completed.is_set():
            return
        logger.info("Cancelling aggregation of %d users", len(self.users))
        self.cancel_event.set()
        for future in self._futures.values():
            future.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every task has settled."""
        return self.completed.wait(timeout)

    def close(self) -> None:
        if self._closed:
            return
        if not self.completed.is_set():
            self.cancel()
        self.completed.wait()
        self._executor.shutdown(wait=True)
        self._closed = True

    def __enter__(self) -> "Aggregation":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class FollowingsAggregator:
    """Launch one followings fetch per user and stream the results."""

    def __init__(
        self,
        fetcher: PaginatedFollowingsFetcher,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self._fetcher = fetcher
        self._max_workers = max(1, max_workers)

    def aggregate(self, users: Sequence[str]) -> Aggregation:
        users = list(users)
        executor = ThreadPoolExecutor(
            max_workers=max(1, min(self._max_workers, len(users))),
            thread_name_prefix="cumuli-fetch",
        )
        aggregation = Aggregation(users, executor)
        logger.info("Fetching followings for %d users", len(users))
        aggregation._launch(self._fetcher)
        return aggregation
