"""
Knowledge Graph Orchestrator

Coordinates one graph build: structure, similarity, relationships,
clusters and statistics.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Sequence

import structlog

from dealgraph.config import Settings, get_settings
from dealgraph.errors import GraphIntegrityError
from dealgraph.models.graph import (
    GraphEdge,
    GraphMetadata,
    GraphNode,
    KnowledgeGraph,
    NegotiatedWithEdge,
    SimilarToEdge,
)
from dealgraph.models.records import HistoricalDeal
from dealgraph.pipeline.builder import BuildResult, GraphBuilder
from dealgraph.pipeline.clusters import compute_clusters
from dealgraph.pipeline.relationships import RelationshipAggregator
from dealgraph.pipeline.similarity import SimilarityEngine
from dealgraph.pipeline.statistics import compute_statistics

logger = structlog.get_logger(__name__)


def check_integrity(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> None:
    """Raise GraphIntegrityError on duplicate node ids or dangling edges."""
    node_ids: set[str] = set()
    for node in nodes:
        if node.id in node_ids:
            raise GraphIntegrityError(f"Duplicate node id: {node.id}")
        node_ids.add(node.id)

    for edge in edges:
        if edge.source not in node_ids or edge.target not in node_ids:
            raise GraphIntegrityError(
                f"Dangling edge {edge.id}: {edge.source} -> {edge.target}"
            )


class KnowledgeGraphBuilder:
    """
    Builds a KnowledgeGraph from a historical deal corpus.

    Coordinates:
    1. Structure (nodes + structural edges)
    2. Similarity edges and relationship edges (optionally side by side)
    3. Clusters and statistics
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def build(
        self,
        organization_id: str,
        deals: Sequence[HistoricalDeal],
    ) -> KnowledgeGraph:
        """
        Build a new graph for the given corpus.

        Args:
            organization_id: Owner of the corpus.
            deals: Historical deal records, in corpus order.

        Returns:
            The finished, immutable KnowledgeGraph.
        """
        built_at = datetime.now(timezone.utc)
        log = logger.bind(organization_id=organization_id)
        log.info("graph_build_started", deals=len(deals))

        structure = GraphBuilder(timestamp=built_at).build(deals)
        similarity_edges, negotiation_edges = self._derive_edges(
            structure, structure.records, built_at
        )

        nodes = structure.nodes
        edges: tuple[GraphEdge, ...] = (
            *structure.edges,
            *similarity_edges,
            *negotiation_edges,
        )
        check_integrity(nodes, edges)

        clusters = compute_clusters(nodes)
        statistics = compute_statistics(
            nodes, edges, path_sample_size=self.settings.path_length_sample_size
        )

        graph = KnowledgeGraph(
            id=f"kg-{organization_id}-{int(built_at.timestamp() * 1000)}",
            organization_id=organization_id,
            nodes=nodes,
            edges=edges,
            metadata=GraphMetadata(
                created_at=built_at,
                updated_at=built_at,
                node_count=len(nodes),
                edge_count=len(edges),
                clusters=clusters,
                statistics=statistics,
            ),
        )

        log.info(
            "graph_build_completed",
            graph_id=graph.id,
            nodes=len(nodes),
            edges=len(edges),
            similar_edges=len(similarity_edges),
            negotiation_edges=len(negotiation_edges),
            clusters=len(clusters),
        )
        return graph

    def _derive_edges(
        self,
        structure: BuildResult,
        deals: Sequence[HistoricalDeal],
        built_at: datetime,
    ) -> tuple[list[SimilarToEdge], list[NegotiatedWithEdge]]:
        similarity = SimilarityEngine(
            workers=self.settings.similarity_workers,
            batch_size=self.settings.similarity_batch_size,
            timestamp=built_at,
        )
        relationships = RelationshipAggregator(timestamp=built_at)

        if not self.settings.parallel_stages:
            return (
                similarity.compute(structure.deal_nodes),
                relationships.aggregate(deals, structure.counterparties),
            )

        with ThreadPoolExecutor(max_workers=2) as pool:
            similar_future = pool.submit(similarity.compute, structure.deal_nodes)
            negotiation_future = pool.submit(
                relationships.aggregate, deals, structure.counterparties
            )
            return similar_future.result(), negotiation_future.result()


def build_knowledge_graph(
    organization_id: str,
    deals: Sequence[HistoricalDeal],
    settings: Settings | None = None,
) -> KnowledgeGraph:
    """Build a knowledge graph from historical deals."""
    return KnowledgeGraphBuilder(settings=settings).build(organization_id, deals)
