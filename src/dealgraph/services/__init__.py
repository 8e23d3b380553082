"""Services for loading deal corpora and querying finished graphs."""

from dealgraph.services.corpus_loader import load_corpus, parse_corpus
from dealgraph.services.query_service import (
    CounterpartyInsights,
    GraphQueryService,
    RelatedNodes,
    SimilarDeal,
    find_similar_deals,
    get_counterparty_insights,
    get_related_nodes,
)

__all__ = [
    "load_corpus",
    "parse_corpus",
    "GraphQueryService",
    "SimilarDeal",
    "CounterpartyInsights",
    "RelatedNodes",
    "find_similar_deals",
    "get_counterparty_insights",
    "get_related_nodes",
]
