"""Cluster Analyzer: groups deal nodes into cohorts by deal type and status."""

from typing import Iterable

from dealgraph.models.graph import DealNode, GraphCluster, GraphNode, NodeType


def compute_clusters(nodes: Iterable[GraphNode]) -> list[GraphCluster]:
    """Partition deal nodes by ``{deal_type}-{status}`` in first-seen order."""
    buckets: dict[tuple[str, str], list[DealNode]] = {}
    for node in nodes:
        if node.type != NodeType.DEAL:
            continue
        key = (node.properties.deal_type, node.properties.status)
        buckets.setdefault(key, []).append(node)

    clusters = []
    for (deal_type, status), members in buckets.items():
        clusters.append(
            GraphCluster(
                id=f"cluster-{deal_type}-{status}",
                label=f"{deal_type} - {status}",
                deal_type=deal_type,
                status=status,
                node_ids=[deal.id for deal in members],
                characteristics=[
                    f"Deal Type: {deal_type}",
                    f"Status: {status}",
                    f"Count: {len(members)}",
                ],
            )
        )
    return clusters
