"""
Cumuli Data Models and Enums

File Purpose: Core data structures for followings lists and the shared graph
Primary Functions/Classes: NodeGroup, FollowingsList, FetchFailure, Node, Edge, Graph, validate_users
Inputs and Outputs (I/O): Data structure definitions, no direct I/O operations

These structures are built fresh for each request and discarded once the
graph has been handed to the caller.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Union

from .exceptions import FetchFailed, InvalidInput


class NodeGroup(IntEnum):
    """Classification of a graph node."""

    INPUT = 1
    DISCOVERED = 2


def is_blank(user_id: str) -> bool:
    """Blank identifiers are placeholders for slots a page never filled."""
    return not user_id or not user_id.strip()


@dataclass
class FollowingsList:
    """The complete followings of one user, in remote order."""

    owner: str
    followed: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.followed)


@dataclass
class FetchFailure:
    """Tagged stream item for a user whose fetch did not complete."""

    user: str
    error: FetchFailed


StreamItem = Union[FollowingsList, FetchFailure]


@dataclass(frozen=True)
class Node:
    name: str
    group: NodeGroup

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "group": int(self.group)}


@dataclass(frozen=True)
class Edge:
    """Directed link from a follower (source) to a followed node (target)."""

    source: int
    target: int

    def to_dict(self) -> Dict[str, int]:
        return {"source": self.source, "target": self.target}


@dataclass
class Graph:
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Serialize to the D3 shape: {"nodes": [...], "links": [...]}."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [edge.to_dict() for edge in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Graph":
        nodes = [
            Node(name=item["name"], group=NodeGroup(int(item["group"])))
            for item in data.get("nodes", [])
        ]
        edges = [
            Edge(source=int(item["source"]), target=int(item["target"]))
            for item in data.get("links", [])
        ]
        return cls(nodes=nodes, edges=edges)

    def node_names(self) -> List[str]:
        return [node.name for node in self.nodes]

    def named_edges(self) -> List[tuple]:
        """Edges as (source name, target name) pairs."""
        return [
            (self.nodes[edge.source].name, self.nodes[edge.target].name)
            for edge in self.edges
        ]


def parse_users(raw: str) -> List[str]:
    """Split a space-separated request parameter into user identifiers."""
    if raw is None:
        return []
    return raw.split()


def validate_users(users: Iterable[str]) -> List[str]:
    """Return the users in caller order without duplicates.

    Raises InvalidInput for an empty request or any blank or malformed
    identifier.
    """
    if users is None or isinstance(users, str):
        raise InvalidInput("Users must be a sequence of identifiers")

    validated: List[str] = []
    for user in users:
        if not isinstance(user, str):
            raise InvalidInput(
                "User identifiers must be strings", details=repr(user)
            )
        if is_blank(user):
            raise InvalidInput("Blank user identifier")
        if any(ch.isspace() for ch in user) or "/" in user:
            raise InvalidInput("Malformed user identifier", details=user)
        if user not in validated:
            validated.append(user)

    if not validated:
        raise InvalidInput("At least one user is required")
    return validated
