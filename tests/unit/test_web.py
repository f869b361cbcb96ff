"""
Tests for the graph API blueprint.
"""
from dataclasses import replace

import pytest

from cumuli.service import SharedFollowingsService
from cumuli.web import create_app
from tests.fixtures.mock_data import create_example_directory


@pytest.fixture
def make_client(settings):
    def _make(directory=None, **overrides):
        service = SharedFollowingsService(
            directory or create_example_directory(), replace(settings, **overrides)
        )
        app = create_app(service=service, testing=True)
        return app.test_client()
    return _make


class TestGraphApi:
    def test_health(self, make_client):
        response = make_client().get("/health")

        assert response.status_code == 200
        assert response.get_json() == {"status": "ok"}

    def test_graph(self, make_client):
        response = make_client().get("/api/graph", query_string={"u": "A B C"})

        assert response.status_code == 200
        data = response.get_json()
        names = [node["name"] for node in data["nodes"]]
        assert names[:3] == ["A", "B", "C"]
        assert set(names) == {"A", "B", "C", "X", "Z"}
        assert len(data["links"]) == 4
        assert all(set(link) == {"source", "target"} for link in data["links"])

    def test_missing_users(self, make_client):
        response = make_client().get("/api/graph")

        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_aborted_request(self, make_client):
        client = make_client(create_example_directory(failing_users={"B"}))

        response = client.get("/api/graph", query_string={"u": "A B C"})

        assert response.status_code == 502
        assert response.get_json()["user"] == "B"

    def test_excluded_user_still_returns_graph(self, make_client):
        client = make_client(
            create_example_directory(failing_users={"B"}), failure_policy="exclude"
        )

        response = client.get("/api/graph", query_string={"u": "A B C"})

        assert response.status_code == 200
        assert [n["name"] for n in response.get_json()["nodes"]] == ["A", "B", "C"]
