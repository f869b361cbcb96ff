"""
Tests for GraphCache

Filesystem caching of shared graphs with TTL support.
"""
import json
import time

import pytest

from cumuli.models import Graph
from cumuli.network.cache import GraphCache
from tests.fixtures.mock_data import create_mock_graph_json


class TestGraphCache:
    """Test suite for GraphCache."""

    @pytest.fixture
    def cache(self, temp_dir):
        return GraphCache(str(temp_dir / "graphs"), ttl=3600)

    @pytest.fixture
    def graph(self):
        return Graph.from_dict(create_mock_graph_json())

    def test_key_ignores_request_order(self):
        assert GraphCache.make_key(["b", "a", "c"]) == GraphCache.make_key(["c", "b", "a"])
        assert GraphCache.make_key(["b", "a"]) == "a b"

    def test_set_and_get(self, cache, graph):
        cache.set(["B", "A"], graph)

        cached = cache.get(["A", "B"])
        assert cached == graph
        assert cached.to_dict() == create_mock_graph_json()

    def test_missing_entry(self, cache):
        assert cache.get(["nobody"]) is None

    def test_many_users_fit_in_one_file_name(self, cache, graph):
        users = [f"soundcloud-artist-{i:03d}" for i in range(200)]

        cache.set(users, graph)

        assert cache.get(list(reversed(users))) == graph
        assert len(cache.path_for(GraphCache.make_key(users)).name) < 100

    def test_expired_entry_is_removed(self, temp_dir, graph):
        cache = GraphCache(str(temp_dir / "short"), ttl=0)
        cache.set(["A"], graph)
        path = cache.path_for("A")

        time.sleep(0.05)
        assert cache.get(["A"]) is None
        assert not path.exists()

    def test_corrupt_entry_is_discarded(self, cache, graph):
        cache.set(["A"], graph)
        path = cache.path_for("A")
        path.write_text("{not json")

        assert cache.get(["A"]) is None
        assert not path.exists()

    def test_malformed_graph_is_a_miss(self, cache):
        path = cache.path_for("A")
        path.write_text(json.dumps({
            "key": "A",
            "stored_at": time.time(),
            "graph": {"nodes": [{"name": "A", "group": 7}], "links": []},
        }))

        assert cache.get(["A"]) is None
        assert not path.exists()

    def test_entry_for_other_key_is_a_miss(self, cache, graph):
        cache.set(["A"], graph)
        entry = json.loads(cache.path_for("A").read_text())
        entry["key"] = "B"
        cache.path_for("A").write_text(json.dumps(entry))

        assert cache.get(["A"]) is None

    def test_unreadable_entry_is_a_miss(self, cache, graph):
        # A directory where the entry file should be makes reads fail
        cache.path_for("A").mkdir()

        assert cache.get(["A"]) is None
        cache.set(["A"], graph)
