"""
Command-line entry point: print the shared followings graph for some users.

Usage: python -m cumuli user1 user2 [user3 ...] [--json] [--policy exclude]
"""

import argparse
import contextlib
import json
import logging
from dataclasses import replace
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .exceptions import CumuliError, handle_error
from .models import Graph, NodeGroup
from .network.client import SoundCloudClient
from .service import SharedFollowingsService
from .settings import FAILURE_POLICIES, load_settings

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cumuli",
        description="Show accounts followed by at least two of the given SoundCloud users.",
    )
    parser.add_argument("users", nargs="+", help="User permalinks")
    parser.add_argument("--json", action="store_true", help="Print the graph as JSON")
    parser.add_argument(
        "--policy",
        choices=FAILURE_POLICIES,
        help="What to do when one user's followings cannot be fetched",
    )
    parser.add_argument("--page-size", type=int, help="Followings per page query")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress")
    return parser


def render_graph(graph: Graph, title: str) -> Table:
    """Tabulate nodes with their inbound link counts."""
    inbound = [0] * len(graph.nodes)
    for edge in graph.edges:
        inbound[edge.target] += 1

    table = Table(title=title)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Account", style="cyan")
    table.add_column("Group")
    table.add_column("Followed by", justify="right")

    for i, node in enumerate(graph.nodes):
        group = "input" if node.group is NodeGroup.INPUT else "[green]shared[/]"
        table.add_row(str(i), node.name, group, str(inbound[i]))
    return table


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        settings = load_settings()
        if args.policy:
            settings = replace(settings, failure_policy=args.policy)
        if args.page_size is not None:
            settings = replace(settings, page_size=args.page_size)

        client = SoundCloudClient.from_settings(settings)
        try:
            service = SharedFollowingsService(client, settings)
            status = (
                contextlib.nullcontext()
                if args.json
                else console.status(f"Fetching followings for {len(args.users)} users...")
            )
            with status:
                graph = service.build_graph(args.users)
        finally:
            client.close()
    except CumuliError as e:
        handle_error(console, e, "Building shared graph", show_details=True)
        return 1

    if args.json:
        print(json.dumps(graph.to_dict()))
        return 0

    console.print(render_graph(graph, f"Shared followings of {' '.join(args.users)}"))
    console.print(f"[dim]{len(graph.edges)} links[/]")
    return 0
