"""Shared followings service: validation, aggregation, graph build and caching.

Wires the fetcher, aggregator and builder together from Settings and puts
the result cache in front of the whole pipeline.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from cumuli.graph import FailurePolicy, SharedGraphBuilder
from cumuli.models import Graph, validate_users
from cumuli.network.aggregator import FollowingsAggregator
from cumuli.network.cache import GraphCache
from cumuli.network.client import RemoteDirectory
from cumuli.network.fetcher import PaginatedFollowingsFetcher
from cumuli.settings import Settings

logger = logging.getLogger(__name__)


class SharedFollowingsService:
    """Compute shared followings graphs for sets of users."""

    def __init__(
        self,
        directory: RemoteDirectory,
        settings: Optional[Settings] = None,
        *,
        cache: Optional[GraphCache] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.fetcher = PaginatedFollowingsFetcher.from_settings(directory, self.settings)
        self.aggregator = FollowingsAggregator(
            self.fetcher, max_workers=self.settings.max_workers
        )
        self.policy = FailurePolicy(self.settings.failure_policy)
        self.cache = cache

    def build_graph(
        self, users: Iterable[str], policy: Optional[FailurePolicy] = None
    ) -> Graph:
        """Fetch every user's followings and build their shared graph.

        Raises InvalidInput before any fetch is launched, and
        AggregationAborted when a fetch fails under the abort policy. In
        that case the remaining fetches are cancelled before returning.
        """
        users = validate_users(users)
        builder = SharedGraphBuilder(policy or self.policy)
        with self.aggregator.aggregate(users) as aggregation:
            graph = builder.build(users, aggregation)
        if builder.excluded:
            logger.warning(
                "Graph for %s excludes failed users: %s",
                " ".join(users),
                ", ".join(builder.excluded),
            )
        return graph

    def get_graph_json(self, users: Iterable[str]) -> Dict[str, Any]:
        """Return the serialized graph, served from the cache when fresh."""
        users = validate_users(users)

        if self.cache is not None:
            cached = self.cache.get(users)
            if cached is not None:
                logger.info("Cache hit for %s", GraphCache.make_key(users))
                return cached.to_dict()

        graph = self.build_graph(users)

        if self.cache is not None:
            self.cache.set(users, graph)
        return graph.to_dict()
