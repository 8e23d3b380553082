"""
dealgraph: Knowledge Graph Builder for Historical Deal Negotiations

This package builds a typed knowledge graph from a corpus of historical
negotiated deals (terms, participants, counterparties, market conditions
and outcomes) and answers similarity, counterparty and neighbourhood
queries against it.
"""

__version__ = "0.1.0"
__author__ = "dealgraph Team"

from dealgraph.config import get_settings
from dealgraph.pipeline.orchestrator import build_knowledge_graph

__all__ = ["get_settings", "build_knowledge_graph", "__version__"]
