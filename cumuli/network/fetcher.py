"""Paginated followings fetcher.

Retrieves one user's complete followings list. The follow count decides
how many pages are requested; pages run concurrently on a thread pool and
each writes into its own slot range of a preallocated buffer, so the final
order never depends on which page finishes first.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import List, Optional

from cumuli.exceptions import (
    FetchCancelled,
    FetchFailed,
    FetchTimeout,
    MalformedResponseError,
)
from cumuli.models import FollowingsList
from cumuli.network.client import RemoteDirectory

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
DEFAULT_PAGE_WORKERS = 4

# How often a waiting fetch re-checks cancellation and its deadline
POLL_INTERVAL = 0.1


class PaginatedFollowingsFetcher:
    """Fetch the full, ordered followings list for a single user.

    Any failure of the count query or a page query is raised as
    FetchFailed(user, cause). Retries belong to the directory client.
    """

    def __init__(
        self,
        directory: RemoteDirectory,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_workers: int = DEFAULT_PAGE_WORKERS,
        timeout: Optional[float] = None,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._directory = directory
        self.page_size = page_size
        self._max_workers = max(1, max_workers)
        self._timeout = timeout

    @classmethod
    def from_settings(cls, directory: RemoteDirectory, settings) -> "PaginatedFollowingsFetcher":
        return cls(
            directory,
            page_size=settings.page_size,
            max_workers=settings.page_workers,
            timeout=settings.fetch_timeout,
        )

    def fetch(
        self, user: str, cancel_event: Optional[threading.Event] = None
    ) -> FollowingsList:
        """Return every account ``user`` follows, in remote order.

        Slots a short page never filled stay blank ("").
        """
        deadline = time.monotonic() + self._timeout if self._timeout else None
        try:
            _raise_if_cancelled(cancel_event)
            count = self._directory.follow_count(user)
            _raise_if_cancelled(cancel_event)
            if count < 0:
                raise MalformedResponseError(f"Negative follow count for '{user}'")

            followed = [""] * count
            pages = math.ceil(count / self.page_size)
            if pages:
                self._fetch_pages(user, count, pages, followed, cancel_event, deadline)
        except FetchFailed:
            raise
        except Exception as exc:
            logger.warning("Followings fetch failed for %s: %s", user, exc)
            raise FetchFailed(user, exc) from exc

        logger.info("Fetched %d followings for %s in %d pages", count, user, pages)
        return FollowingsList(owner=user, followed=followed)

    def _fetch_pages(
        self,
        user: str,
        count: int,
        pages: int,
        followed: List[str],
        cancel_event: Optional[threading.Event],
        deadline: Optional[float],
    ) -> None:
        """Run all page queries, cancelling the rest on the first failure."""
        abort = threading.Event()
        pool = ThreadPoolExecutor(
            max_workers=min(self._max_workers, pages),
            thread_name_prefix=f"cumuli-page-{user}",
        )
        try:
            pending = {
                pool.submit(self._fetch_page, user, page, count, followed, abort)
                for page in range(pages)
            }
            while pending:
                _raise_if_cancelled(cancel_event)
                wait_for = POLL_INTERVAL
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise FetchTimeout(
                            f"Fetching {pages} pages for '{user}' timed out",
                            details=f"{len(pending)} pages outstanding",
                        )
                    wait_for = min(wait_for, remaining)
                done, pending = wait(pending, timeout=wait_for, return_when=FIRST_COMPLETED)
                for future in done:
                    future.result()
        except BaseException:
            abort.set()
            raise
        finally:
            # Queued pages are dropped; pages already in flight finish within
            # the HTTP timeout and see `abort` before writing
            pool.shutdown(wait=True, cancel_futures=True)

    def _fetch_page(
        self,
        user: str,
        page: int,
        count: int,
        followed: List[str],
        abort: threading.Event,
    ) -> None:
        if abort.is_set():
            return
        offset = page * self.page_size
        items = self._directory.followed_page(user, offset, self.page_size)
        if abort.is_set():
            return
        # Each page owns slots [offset, offset + page_size); no two pages overlap
        for j, name in enumerate(items[: self.page_size]):
            index = offset + j
            if index >= count:
                break
            followed[index] = name or ""
        if len(items) < self.page_size and offset + len(items) < count:
            logger.debug(
                "Short page %d for %s: %d items, %d slots left blank",
                page,
                user,
                len(items),
                min(count, offset + self.page_size) - offset - len(items),
            )


def _raise_if_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise FetchCancelled("Fetch cancelled")
