"""Network package: followings retrieval for the shared graph.

Provides:
- SoundCloudClient: Rate-limited sync HTTP client implementing RemoteDirectory
- PaginatedFollowingsFetcher: Concurrent paged fetch of one user's followings
- FollowingsAggregator: One fetch per user, streamed in completion order
- GraphCache: Filesystem cache with TTL for serialized graphs
"""

from cumuli.network.aggregator import Aggregation, FollowingsAggregator
from cumuli.network.cache import GraphCache
from cumuli.network.client import RemoteDirectory, SoundCloudClient
from cumuli.network.fetcher import PaginatedFollowingsFetcher

__all__ = [
    "Aggregation",
    "FollowingsAggregator",
    "GraphCache",
    "PaginatedFollowingsFetcher",
    "RemoteDirectory",
    "SoundCloudClient",
]
