"""
Cumuli: a shared followings visualizer for SoundCloud.

Given a set of users, finds the accounts followed by at least two of them
and builds a node/link graph for D3 rendering.
"""

from cumuli.exceptions import AggregationAborted, CumuliError, FetchFailed, InvalidInput
from cumuli.graph import BuilderState, FailurePolicy, SharedGraphBuilder
from cumuli.models import Edge, FetchFailure, FollowingsList, Graph, Node, NodeGroup
from cumuli.service import SharedFollowingsService
from cumuli.settings import Settings, load_settings

__version__ = "1.0.0"

__all__ = [
    "AggregationAborted",
    "BuilderState",
    "CumuliError",
    "Edge",
    "FailurePolicy",
    "FetchFailed",
    "FetchFailure",
    "FollowingsList",
    "Graph",
    "InvalidInput",
    "Node",
    "NodeGroup",
    "Settings",
    "SharedFollowingsService",
    "SharedGraphBuilder",
    "load_settings",
]
