"""
Tests for Cumuli data models.
"""
import pytest

from cumuli.exceptions import InvalidInput
from cumuli.models import (
    Edge,
    FollowingsList,
    Graph,
    Node,
    NodeGroup,
    is_blank,
    parse_users,
    validate_users,
)
from tests.fixtures.mock_data import create_mock_graph_json


class TestGraph:
    def test_to_dict_shape(self):
        graph = Graph(
            nodes=[Node("A", NodeGroup.INPUT), Node("X", NodeGroup.DISCOVERED)],
            edges=[Edge(0, 1)],
        )

        assert graph.to_dict() == {
            "nodes": [{"name": "A", "group": 1}, {"name": "X", "group": 2}],
            "links": [{"source": 0, "target": 1}],
        }

    def test_from_dict(self):
        graph = Graph.from_dict(create_mock_graph_json())

        assert graph.node_names() == ["A", "B", "X"]
        assert graph.nodes[2].group is NodeGroup.DISCOVERED
        assert graph.named_edges() == [("A", "X"), ("B", "X")]

    def test_followings_list_length(self):
        assert len(FollowingsList("A", ["x", ""])) == 2


class TestUsers:
    def test_parse_users(self):
        assert parse_users("alice  bob carol") == ["alice", "bob", "carol"]
        assert parse_users("") == []
        assert parse_users(None) == []

    def test_validate_keeps_order_and_drops_duplicates(self):
        assert validate_users(["b", "a", "b"]) == ["b", "a"]

    @pytest.mark.parametrize("users", [
        [],
        [""],
        ["a", "  "],
        ["a b"],
        ["a/b"],
        [None],
        "alice",
    ])
    def test_validate_rejects(self, users):
        with pytest.raises(InvalidInput):
            validate_users(users)

    def test_is_blank(self):
        assert is_blank("")
        assert is_blank("   ")
        assert not is_blank("x")
