"""Filesystem cache for shared followings graphs.

One JSON file per user set, holding the serialized graph and the time it
was stored. The logical key is the sorted, space-joined user list; file
names are its SHA-256 digest so any number of users fits the filesystem's
name limit. An unreadable, stale or malformed entry is a cache miss.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Iterable, Optional

from cumuli.models import Graph

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = "~/.cumuli/graph_cache"

# Long enough to cover a browser refresh of the same request
DEFAULT_TTL_SECONDS = 60


class GraphCache:
    """Time-limited store of graphs keyed by the requested user set."""

    def __init__(
        self,
        cache_dir: str = DEFAULT_CACHE_DIR,
        ttl: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._base_path = Path(cache_dir).expanduser()
        self._base_path.mkdir(parents=True, exist_ok=True)
        self._ttl = ttl
        logger.info("Graph cache initialized at %s (ttl %ds)", self._base_path, ttl)

    @classmethod
    def from_settings(cls, settings) -> "GraphCache":
        return cls(settings.cache_dir, ttl=settings.cache_ttl)

    @staticmethod
    def make_key(users: Iterable[str]) -> str:
        """Sorted, space-joined users: the same set always maps to one entry."""
        return " ".join(sorted(users))

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._base_path / f"{digest}.json"

    def get(self, users: Iterable[str]) -> Optional[Graph]:
        """Return the cached graph for ``users`` if present and fresh."""
        key = self.make_key(users)
        path = self.path_for(key)

        try:
            entry = json.loads(path.read_text())
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable cache entry for '%s': %s", key, exc)
            self._discard(path)
            return None

        if not isinstance(entry, dict) or entry.get("key") != key:
            logger.warning("Cache entry %s does not belong to '%s'", path.name, key)
            self._discard(path)
            return None

        if time.time() - entry.get("stored_at", 0) > self._ttl:
            logger.info("Cache expired for '%s'", key)
            self._discard(path)
            return None

        try:
            return Graph.from_dict(entry["graph"])
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Malformed cached graph for '%s': %s", key, exc)
            self._discard(path)
            return None

    def set(self, users: Iterable[str], graph: Graph) -> None:
        """Store ``graph`` for ``users``; failures are logged, never raised."""
        key = self.make_key(users)
        entry = {"key": key, "stored_at": time.time(), "graph": graph.to_dict()}
        try:
            self.path_for(key).write_text(json.dumps(entry, separators=(",", ":")))
        except OSError as exc:
            logger.warning("Cache write error for '%s': %s", key, exc)

    def _discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.debug("Could not remove %s: %s", path, exc)
