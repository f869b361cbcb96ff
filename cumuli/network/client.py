"""Sync HTTP client for the SoundCloud public API with rate limiting.

Implements the RemoteDirectory capability used by the followings fetcher:
how many accounts a user follows, and one page of followed permalinks.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional, Protocol

import requests

from cumuli.exceptions import (
    ConfigurationError,
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
    TransportError,
)

logger = logging.getLogger(__name__)

# SoundCloud API base URL
SOUNDCLOUD_API_BASE = "https://api.soundcloud.com"

# Defaults
DEFAULT_MAX_POINTS = 15000
DEFAULT_WINDOW_SECONDS = 86400
DEFAULT_TIMEOUT = 30
DEFAULT_MAX_RETRIES = 3


class RemoteDirectory(Protocol):
    """Read-only source of follow relationships, safe to share across threads."""

    def follow_count(self, user: str) -> int:
        ...

    def followed_page(self, user: str, offset: int, limit: int) -> List[str]:
        ...


class RateLimiter:
    """Points-based rate limiter for the SoundCloud API.

    Thread-safe via threading.Lock; one point per request by default.
    """

    def __init__(
        self,
        max_points: int = DEFAULT_MAX_POINTS,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
    ) -> None:
        self.max_points = max_points
        self.window_seconds = window_seconds
        self._requests: List[tuple] = []  # (timestamp, points_cost)
        self._lock = threading.Lock()

    def acquire(self, points_cost: int = 1) -> None:
        """Block until we can safely make a request without exceeding rate limit."""
        while True:
            with self._lock:
                now = time.time()
                cutoff = now - self.window_seconds
                self._requests = [
                    (ts, cost) for ts, cost in self._requests if ts > cutoff
                ]
                current_points = sum(cost for _, cost in self._requests)

                if current_points + points_cost <= self.max_points or not self._requests:
                    self._requests.append((now, points_cost))
                    return

                oldest_ts = self._requests[0][0]
                wait_time = (oldest_ts + self.window_seconds) - now + 1
                logger.warning(
                    "Rate limit approaching (%d/%d points). Waiting %.1fs...",
                    current_points,
                    self.max_points,
                    wait_time,
                )
            # Sleep outside the lock so other threads aren't blocked
            time.sleep(max(wait_time, 0))


class SoundCloudClient:
    """Sync wrapper around the SoundCloud users API.

    Uses requests.Session with rate limiting and exponential backoff.
    Transport failures surface as DirectoryError subclasses.
    """

    def __init__(
        self,
        client_id: str,
        *,
        base_url: str = SOUNDCLOUD_API_BASE,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        max_points: int = DEFAULT_MAX_POINTS,
        backoff_base: float = 0.5,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not client_id:
            raise ConfigurationError(
                "A SoundCloud client id is required",
                details="Set CUMULI_CLIENT_ID (or SC_CLIENT_ID) in the environment.",
            )
        self._client_id = client_id
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._backoff_base = backoff_base
        self._rate_limiter = RateLimiter(max_points=max_points)
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "User-Agent": "Cumuli/1.0",
                "Accept": "application/json",
            }
        )

    @classmethod
    def from_settings(cls, settings) -> "SoundCloudClient":
        return cls(
            settings.client_id,
            base_url=settings.api_base,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
        )

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def _request(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        points_cost: int = 1,
    ) -> Any:
        """Make a request with rate limiting and exponential backoff."""
        self._rate_limiter.acquire(points_cost)

        query: Dict[str, Any] = {"client_id": self._client_id}
        if params:
            query.update(params)
        url = f"{self._base_url}{endpoint}"
        max_retries = self._max_retries

        for attempt in range(max_retries):
            last_attempt = attempt == max_retries - 1
            try:
                response = self._session.get(url, params=query, timeout=self._timeout)
                response.raise_for_status()
            except requests.HTTPError as exc:
                status = exc.response.status_code if exc.response is not None else 0

                if status == 404:
                    raise NotFoundError(
                        f"Not found: {endpoint}", details=str(exc), original_error=exc
                    )

                # 429 Rate Limit
                if status == 429:
                    if last_attempt:
                        raise RateLimitedError(
                            f"Rate limited on {endpoint}",
                            details=f"Gave up after {max_retries} attempts",
                            original_error=exc,
                        )
                    wait_time = (2**attempt) * self._backoff_base * 2
                    logger.warning(
                        "Rate limit (429) on %s (attempt %d/%d). Waiting %.1fs...",
                        endpoint,
                        attempt + 1,
                        max_retries,
                        wait_time,
                    )
                    time.sleep(wait_time)
                    continue

                # 5xx Server Error
                if 500 <= status < 600 and not last_attempt:
                    wait_time = (2**attempt) * self._backoff_base
                    logger.warning(
                        "Server error %d on %s (attempt %d/%d). Retrying in %.1fs...",
                        status,
                        endpoint,
                        attempt + 1,
                        max_retries,
                        wait_time,
                    )
                    time.sleep(wait_time)
                    continue

                raise TransportError(
                    f"HTTP {status} on {endpoint}", details=str(exc), original_error=exc
                )

            except (requests.Timeout, requests.ConnectionError) as exc:
                if not last_attempt:
                    wait_time = (2**attempt) * self._backoff_base
                    logger.warning(
                        "Network error on %s (attempt %d/%d): %s. Retrying in %.1fs...",
                        endpoint,
                        attempt + 1,
                        max_retries,
                        exc,
                        wait_time,
                    )
                    time.sleep(wait_time)
                    continue
                raise TransportError(
                    f"Network error on {endpoint}", details=str(exc), original_error=exc
                )

            except requests.RequestException as exc:
                raise TransportError(
                    f"Request to {endpoint} failed", details=str(exc), original_error=exc
                )

            try:
                return response.json()
            except ValueError as exc:
                raise MalformedResponseError(
                    f"Invalid JSON from {endpoint}", details=str(exc), original_error=exc
                )

        raise TransportError(f"Request to {endpoint} failed after {max_retries} retries")

    # -----------------------------------------------------------------------
    # Directory endpoints
    # -----------------------------------------------------------------------

    def follow_count(self, user: str) -> int:
        """Return how many accounts the user follows."""
        data = self._request(f"/users/{user}.json")
        if not isinstance(data, dict) or data.get("followings_count") is None:
            raise MalformedResponseError(
                f"Missing followings_count for '{user}'", details=repr(data)[:200]
            )
        try:
            return int(float(data["followings_count"]))
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError(
                f"Invalid followings_count for '{user}'",
                details=repr(data["followings_count"]),
                original_error=exc,
            )

    def followed_page(self, user: str, offset: int, limit: int) -> List[str]:
        """Return permalinks of accounts followed by the user, starting at offset."""
        data = self._request(
            f"/users/{user}/followings.json",
            params={"offset": offset, "limit": limit},
        )
        if isinstance(data, dict):
            data = data.get("collection")
        if not isinstance(data, list):
            raise MalformedResponseError(
                f"Unexpected followings payload for '{user}'", details=repr(data)[:200]
            )
        return [
            (item.get("permalink") or "") if isinstance(item, dict) else ""
            for item in data
        ]
