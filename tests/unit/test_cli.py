"""
Tests for the command-line entry point.
"""
import json
from unittest.mock import patch

from cumuli import cli
from cumuli.exceptions import AggregationAborted, FetchFailed, TransportError
from cumuli.models import Graph
from tests.fixtures.mock_data import create_mock_graph_json


class TestCli:
    def test_json_output(self, capsys, monkeypatch):
        monkeypatch.setenv("CUMULI_CLIENT_ID", "test-client")
        graph = Graph.from_dict(create_mock_graph_json())

        with patch.object(cli.SharedFollowingsService, "build_graph", return_value=graph) as build:
            assert cli.main(["A", "B", "--json"]) == 0

        build.assert_called_once_with(["A", "B"])
        assert json.loads(capsys.readouterr().out) == create_mock_graph_json()

    def test_abort_returns_error_status(self, monkeypatch):
        monkeypatch.setenv("CUMULI_CLIENT_ID", "test-client")
        error = AggregationAborted(FetchFailed("B", TransportError("reset")))

        with patch.object(cli.SharedFollowingsService, "build_graph", side_effect=error):
            assert cli.main(["A", "B"]) == 1

    def test_zero_page_size_is_rejected(self, monkeypatch):
        monkeypatch.setenv("CUMULI_CLIENT_ID", "test-client")

        with patch.object(cli.SharedFollowingsService, "build_graph") as build:
            assert cli.main(["A", "B", "--page-size", "0"]) == 1

        build.assert_not_called()

    def test_render_graph_counts_inbound_links(self):
        table = cli.render_graph(Graph.from_dict(create_mock_graph_json()), "t")

        assert table.row_count == 3
        assert list(table.columns[3].cells) == ["0", "0", "2"]
