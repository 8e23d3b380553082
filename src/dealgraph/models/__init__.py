"""
Pydantic models for dealgraph.

This module contains all data models used throughout the application:
- Record models for the historical deal corpus
- Node and edge models for the knowledge graph
- Graph container, cluster and statistics models
"""

from dealgraph.models.records import (
    HistoricalDeal,
    HistoricalParticipant,
    HistoricalTerm,
    MarketConditions,
)
from dealgraph.models.graph import (
    CentralNode,
    CounterpartyNode,
    DealNode,
    EdgeType,
    GraphCluster,
    GraphEdge,
    GraphMetadata,
    GraphNode,
    GraphStatistics,
    KnowledgeGraph,
    MarketConditionNode,
    NegotiatedWithEdge,
    NegotiationStats,
    NodeType,
    OutcomeNode,
    ParticipantNode,
    SimilarToEdge,
    TermNode,
)

__all__ = [
    # Record models
    "HistoricalDeal",
    "HistoricalParticipant",
    "HistoricalTerm",
    "MarketConditions",
    # Graph models
    "NodeType",
    "EdgeType",
    "GraphNode",
    "GraphEdge",
    "DealNode",
    "TermNode",
    "ParticipantNode",
    "CounterpartyNode",
    "MarketConditionNode",
    "OutcomeNode",
    "SimilarToEdge",
    "NegotiatedWithEdge",
    "NegotiationStats",
    # Container models
    "KnowledgeGraph",
    "GraphMetadata",
    "GraphCluster",
    "GraphStatistics",
    "CentralNode",
]
