"""
Pipeline stages for knowledge graph construction.

1. Builder - nodes and structural edges from the deal corpus
2. Similarity - similar_to edges between deals
3. Relationships - negotiated_with edges between counterparties
4. Clusters and statistics over the finished node/edge set
"""

from dealgraph.pipeline.builder import BuildResult, CounterpartyAccumulator, GraphBuilder
from dealgraph.pipeline.similarity import SIMILARITY_THRESHOLD, SimilarityEngine, score_deal_pair
from dealgraph.pipeline.relationships import RelationshipAggregator, RelationshipTally
from dealgraph.pipeline.clusters import compute_clusters
from dealgraph.pipeline.statistics import compute_statistics
from dealgraph.pipeline.orchestrator import KnowledgeGraphBuilder, build_knowledge_graph

__all__ = [
    "BuildResult",
    "CounterpartyAccumulator",
    "GraphBuilder",
    "SIMILARITY_THRESHOLD",
    "SimilarityEngine",
    "score_deal_pair",
    "RelationshipAggregator",
    "RelationshipTally",
    "compute_clusters",
    "compute_statistics",
    "KnowledgeGraphBuilder",
    "build_knowledge_graph",
]
