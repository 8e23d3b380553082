"""
Statistics Engine

Computes degree, density, local clustering coefficient, degree-centrality
ranking and average shortest-path length over a finished node/edge set.
All edges are treated as undirected.
"""

from typing import Sequence

import networkx as nx
import structlog

from dealgraph.models.graph import CentralNode, GraphEdge, GraphNode, GraphStatistics

logger = structlog.get_logger(__name__)

TOP_CENTRAL_NODES = 10


def build_multigraph(
    nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]
) -> nx.MultiGraph:
    """Undirected multigraph keyed by edge id, one entry per graph edge."""
    graph = nx.MultiGraph()
    graph.add_nodes_from(node.id for node in nodes)
    for edge in edges:
        graph.add_edge(edge.source, edge.target, key=edge.id, type=edge.type.value)
    return graph


def density(node_count: int, edge_count: int) -> float:
    """Edges over the maximum possible undirected edges, 0 below two nodes."""
    max_edges = node_count * (node_count - 1) / 2
    return edge_count / max_edges if max_edges > 0 else 0.0


def average_clustering_coefficient(graph: nx.Graph) -> float:
    """
    Mean local clustering coefficient over nodes with at least two neighbours.

    Nodes with fewer neighbours are left out of the average entirely
    rather than counted as zero.
    """
    eligible = [node for node in graph.nodes if graph.degree(node) >= 2]
    if not eligible:
        return 0.0
    coefficients = nx.clustering(graph, nodes=eligible)
    return sum(coefficients[node] for node in eligible) / len(eligible)


def top_central_nodes(
    degrees: dict[str, int], node_count: int, limit: int = TOP_CENTRAL_NODES
) -> list[CentralNode]:
    """Rank by raw degree, descending; ties keep node order."""
    ranked = sorted(degrees.items(), key=lambda item: item[1], reverse=True)[:limit]
    denominator = node_count - 1
    return [
        CentralNode(node_id=node_id, score=degree / denominator if denominator > 0 else 0.0)
        for node_id, degree in ranked
    ]


def average_path_length(graph: nx.Graph, sources: Sequence[str]) -> float:
    """Mean BFS distance from each source to every node reachable from it."""
    total = 0
    pairs = 0
    for source in sources:
        lengths = nx.single_source_shortest_path_length(graph, source)
        for target, distance in lengths.items():
            if target != source:
                total += distance
                pairs += 1
    return total / pairs if pairs > 0 else 0.0


def compute_statistics(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    path_sample_size: int = 100,
) -> GraphStatistics:
    """
    Compute structural statistics for a finished graph.

    Args:
        nodes: All graph nodes.
        edges: All graph edges.
        path_sample_size: Number of BFS sources (taken in node order) used
            for the average path length.

    Returns:
        GraphStatistics
    """
    node_count = len(nodes)
    if node_count == 0:
        return GraphStatistics()

    multigraph = build_multigraph(nodes, edges)
    simple = nx.Graph(multigraph)

    degrees = {node.id: multigraph.degree(node.id) for node in nodes}
    sources = [node.id for node in nodes[:path_sample_size]]

    statistics = GraphStatistics(
        avg_degree=sum(degrees.values()) / node_count,
        density=density(node_count, len(edges)),
        clustering_coefficient=average_clustering_coefficient(simple),
        avg_path_length=average_path_length(simple, sources),
        top_central_nodes=top_central_nodes(degrees, node_count),
    )

    logger.debug(
        "statistics_computed",
        nodes=node_count,
        edges=len(edges),
        density=statistics.density,
        clustering_coefficient=statistics.clustering_coefficient,
    )
    return statistics
