"""Tests for graph statistics."""

import networkx as nx
import pytest

from dealgraph.models.graph import (
    DealNode,
    DealProperties,
    EdgeType,
    GraphStatistics,
    make_edge,
)
from dealgraph.pipeline.statistics import (
    average_clustering_coefficient,
    average_path_length,
    build_multigraph,
    compute_statistics,
    density,
    top_central_nodes,
)


def node(node_id):
    return DealNode(
        id=node_id,
        label=node_id,
        properties=DealProperties(deal_name=node_id, deal_type="t", status="open"),
    )


class TestDensity:

    @pytest.mark.parametrize("n", [0, 1])
    def test_zero_below_two_nodes(self, n):
        assert density(n, 0) == 0.0

    def test_complete_graph(self):
        assert density(4, 6) == 1.0

    def test_partial(self):
        assert density(5, 4) == pytest.approx(0.4)


class TestClusteringCoefficient:

    def test_clique_is_one(self):
        assert average_clustering_coefficient(nx.complete_graph(4)) == pytest.approx(1.0)

    def test_star_hub_is_zero(self):
        # Leaves have one neighbour and are excluded from the mean
        assert average_clustering_coefficient(nx.star_graph(4)) == 0.0

    def test_no_eligible_nodes(self):
        assert average_clustering_coefficient(nx.path_graph(2)) == 0.0

    def test_triangle_with_tail(self):
        graph = nx.Graph([(0, 1), (1, 2), (2, 0), (2, 3)])
        # nodes 0, 1: 1.0; node 2: 1/3; node 3 excluded
        assert average_clustering_coefficient(graph) == pytest.approx((1 + 1 + 1 / 3) / 3)


class TestTopCentralNodes:

    def test_ranked_by_degree_ties_in_node_order(self):
        ranked = top_central_nodes({"a": 3, "b": 1, "c": 3, "d": 1}, 4)
        assert [c.node_id for c in ranked] == ["a", "c", "b", "d"]
        assert ranked[0].score == pytest.approx(1.0)
        assert ranked[2].score == pytest.approx(1 / 3)

    def test_limit(self):
        degrees = {str(i): i for i in range(20)}
        assert len(top_central_nodes(degrees, 20)) == 10

    def test_single_node_scores_zero(self):
        assert top_central_nodes({"a": 0}, 1)[0].score == 0.0


class TestAveragePathLength:

    def test_path_graph(self):
        graph = nx.path_graph(3)
        assert average_path_length(graph, [0, 1, 2]) == pytest.approx(8 / 6)

    def test_unreachable_pairs_ignored(self):
        graph = nx.Graph([(0, 1)])
        graph.add_node(2)
        assert average_path_length(graph, [0, 1, 2]) == pytest.approx(1.0)

    def test_no_sources(self):
        assert average_path_length(nx.path_graph(3), []) == 0.0

    def test_sampled_sources(self):
        graph = nx.path_graph(3)
        assert average_path_length(graph, [0]) == pytest.approx(1.5)


class TestComputeStatistics:

    def test_empty_graph(self):
        assert compute_statistics([], []) == GraphStatistics()

    def test_single_node(self):
        statistics = compute_statistics([node("a")], [])
        assert statistics.avg_degree == 0.0
        assert statistics.density == 0.0
        assert statistics.avg_path_length == 0.0

    def test_parallel_edges_count_toward_degree(self):
        nodes = [node("a"), node("b")]
        edges = [
            make_edge("a", "b", EdgeType.CONTAINS),
            make_edge("b", "a", EdgeType.PARTICIPATED_IN),
        ]
        assert build_multigraph(nodes, edges).degree("a") == 2
        statistics = compute_statistics(nodes, edges)
        assert statistics.avg_degree == 2.0
        assert statistics.avg_path_length == 1.0
        assert statistics.top_central_nodes[0].score == 2.0

    def test_triangle(self):
        nodes = [node("a"), node("b"), node("c")]
        edges = [
            make_edge("a", "b", EdgeType.SIMILAR_TO, weight=0.9),
            make_edge("b", "c", EdgeType.SIMILAR_TO, weight=0.9),
            make_edge("a", "c", EdgeType.SIMILAR_TO, weight=0.9),
        ]
        statistics = compute_statistics(nodes, edges)
        assert statistics.avg_degree == 2.0
        assert statistics.density == 1.0
        assert statistics.clustering_coefficient == pytest.approx(1.0)
        assert statistics.avg_path_length == 1.0

    def test_path_sample_size_limits_sources(self):
        nodes = [node("a"), node("b"), node("c")]
        edges = [
            make_edge("a", "b", EdgeType.CONTAINS),
            make_edge("b", "c", EdgeType.CONTAINS),
        ]
        assert compute_statistics(nodes, edges, path_sample_size=1).avg_path_length == 1.5
        assert compute_statistics(nodes, edges).avg_path_length == pytest.approx(8 / 6)
