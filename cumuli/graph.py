"""
Cumuli Shared Graph Builder

File Purpose: Reduce per-user followings lists into the shared followings graph
Primary Functions/Classes: SharedGraphBuilder, BuilderState, FailurePolicy
Inputs and Outputs (I/O): Consumes a stream of FollowingsList/FetchFailure items, returns a Graph

Membership uses two sets. ``seen`` holds every identifier sighted in at
least one list (plus the input users); ``qualifies`` holds the identifiers
that will become nodes. An identifier qualifies the moment it is sighted in
a list while already in ``seen``. The first list only fills ``seen``: at
that point there is nothing beyond the input seed to compare against.

Which identifiers qualify depends only on how many distinct lists contain
them. Arrival order only decides the index of each discovered node.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .exceptions import AggregationAborted
from .models import (
    Edge,
    FetchFailure,
    FollowingsList,
    Graph,
    Node,
    NodeGroup,
    StreamItem,
    is_blank,
)

logger = logging.getLogger(__name__)


class BuilderState(Enum):
    """Phases of a single build."""

    COLLECTING = "collecting"
    REDUCING = "reducing"
    DONE = "done"


class FailurePolicy(Enum):
    """What to do when a user's fetch failure arrives on the stream."""

    ABORT = "abort"
    EXCLUDE = "exclude"


def _distinct(followed: Iterable[str]) -> List[str]:
    """Non-blank identifiers of one list, first occurrence order."""
    return [f for f in dict.fromkeys(followed) if not is_blank(f)]


class SharedGraphBuilder:
    """Build the shared followings graph for one request."""

    def __init__(self, policy: FailurePolicy = FailurePolicy.ABORT):
        self.policy = FailurePolicy(policy)
        self.state: Optional[BuilderState] = None
        self.excluded: List[str] = []

    def build(self, users: Sequence[str], stream: Iterable[StreamItem]) -> Graph:
        """Drain ``stream`` and return the graph for ``users``.

        Raises AggregationAborted on the first failure under the ABORT policy.
        """
        users = list(dict.fromkeys(users))
        input_users: Set[str] = set(users)

        self.state = BuilderState.COLLECTING
        self.excluded = []

        seen: Set[str] = set(users)
        qualifies: Set[str] = set(users)
        node_order: List[str] = list(users)
        collected: List[FollowingsList] = []

        for item in stream:
            if isinstance(item, FetchFailure):
                self._handle_failure(item)
                continue
            if item.owner not in input_users:
                logger.warning("Ignoring followings of unrequested user %s", item.owner)
                continue

            first = not collected
            collected.append(item)

            for f in _distinct(item.followed):
                if not first and f in seen and f not in qualifies:
                    qualifies.add(f)
                    node_order.append(f)
                seen.add(f)

        self.state = BuilderState.REDUCING
        graph = self._reduce(input_users, node_order, qualifies, collected)
        self.state = BuilderState.DONE

        logger.info(
            "Built shared graph: %d nodes (%d discovered), %d links from %d lists",
            len(graph.nodes),
            len(graph.nodes) - len(users),
            len(graph.edges),
            len(collected),
        )
        return graph

    def _handle_failure(self, item: FetchFailure) -> None:
        if self.policy is FailurePolicy.ABORT:
            logger.error("Aborting graph build: %s", item.error.message)
            raise AggregationAborted(item.error)
        logger.warning(
            "Excluding %s from the graph: %s", item.user, item.error.details
        )
        self.excluded.append(item.user)

    @staticmethod
    def _reduce(
        input_users: Set[str],
        node_order: List[str],
        qualifies: Set[str],
        collected: List[FollowingsList],
    ) -> Graph:
        index: Dict[str, int] = {}
        nodes: List[Node] = []
        for name in node_order:
            index[name] = len(nodes)
            group = NodeGroup.INPUT if name in input_users else NodeGroup.DISCOVERED
            nodes.append(Node(name=name, group=group))

        # Duplicate follows produce duplicate links
        edges: List[Edge] = []
        for followings in collected:
            source = index[followings.owner]
            for f in followings.followed:
                if not is_blank(f) and f in qualifies:
                    edges.append(Edge(source=source, target=index[f]))

        return Graph(nodes=nodes, edges=edges)
