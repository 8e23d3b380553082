"""Query service: read-only traversals over a finished knowledge graph."""

from collections import defaultdict, deque
from dataclasses import dataclass, field

from dealgraph.models.graph import (
    CounterpartyNode,
    EdgeType,
    GraphEdge,
    GraphNode,
    KnowledgeGraph,
    NegotiationStats,
    NodeType,
    counterparty_node_id,
    deal_node_id,
)

_DEAL_PREFIX = deal_node_id("")
_COUNTERPARTY_PREFIX = counterparty_node_id("")


@dataclass
class SimilarDeal:
    """A deal similar to the queried one."""
    deal_id: str
    similarity: float

    def to_dict(self) -> dict:
        return {"deal_id": self.deal_id, "similarity": self.similarity}


@dataclass
class CounterpartyRelationship:
    """A negotiated_with link seen from one counterparty."""
    organization_id: str
    weight: float
    stats: NegotiationStats

    def to_dict(self) -> dict:
        return {
            "organization_id": self.organization_id,
            "weight": self.weight,
            "stats": self.stats.model_dump(mode="json"),
        }


@dataclass
class CounterpartyInsights:
    """Counterparty node plus its relationships to other counterparties."""
    counterparty: CounterpartyNode
    relationships: list[CounterpartyRelationship] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "counterparty": self.counterparty.model_dump(mode="json"),
            "relationships": [r.to_dict() for r in self.relationships],
        }


@dataclass
class RelatedNodes:
    """Nodes reached by a bounded traversal and the edges used to reach them."""
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodes": [n.model_dump(mode="json") for n in self.nodes],
            "edges": [e.model_dump(mode="json") for e in self.edges],
        }


class GraphQueryService:
    """
    Read-only query operations against one KnowledgeGraph.

    Indexes nodes and undirected incidence once; safe to share between
    threads since nothing is mutated after construction.
    """

    def __init__(self, graph: KnowledgeGraph):
        self.graph = graph
        self._nodes: dict[str, GraphNode] = {node.id: node for node in graph.nodes}
        incidence: dict[str, list[GraphEdge]] = defaultdict(list)
        for edge in graph.edges:
            incidence[edge.source].append(edge)
            if edge.target != edge.source:
                incidence[edge.target].append(edge)
        self._incidence = dict(incidence)

    def incident_edges(self, node_id: str) -> list[GraphEdge]:
        return self._incidence.get(node_id, [])

    def find_similar_deals(self, deal_id: str, limit: int = 10) -> list[SimilarDeal]:
        """
        Deals linked to deal_id by similar_to edges, most similar first.

        Args:
            deal_id: Source deal id (not the node id).
            limit: Maximum number of results.
        """
        node_id = deal_node_id(deal_id)
        similar = []
        for edge in self.incident_edges(node_id):
            if edge.type != EdgeType.SIMILAR_TO:
                continue
            other = edge.other_endpoint(node_id)
            similar.append(
                SimilarDeal(deal_id=other.removeprefix(_DEAL_PREFIX), similarity=edge.weight)
            )
        similar.sort(key=lambda s: s.similarity, reverse=True)
        return similar[:limit]

    def get_counterparty_insights(self, organization_id: str) -> CounterpartyInsights | None:
        """Look up a counterparty by organization id; None if not in the graph."""
        node_id = counterparty_node_id(organization_id)
        node = self._nodes.get(node_id)
        if node is None or node.type != NodeType.COUNTERPARTY:
            return None

        relationships = []
        for edge in self.incident_edges(node_id):
            if edge.type != EdgeType.NEGOTIATED_WITH:
                continue
            other = edge.other_endpoint(node_id)
            relationships.append(
                CounterpartyRelationship(
                    organization_id=other.removeprefix(_COUNTERPARTY_PREFIX),
                    weight=edge.weight,
                    stats=edge.properties,
                )
            )
        relationships.sort(key=lambda r: r.weight, reverse=True)
        return CounterpartyInsights(counterparty=node, relationships=relationships)

    def get_related_nodes(self, node_id: str, depth: int = 1) -> RelatedNodes:
        """
        Breadth-first neighbourhood of node_id within depth hops.

        Edges are followed in both directions. Each node is visited once,
        so traversal terminates on cyclic graphs. An unknown node id
        yields an empty result.
        """
        if depth < 0:
            raise ValueError(f"depth must be >= 0, got {depth}")

        start = self._nodes.get(node_id)
        if start is None:
            return RelatedNodes()

        result = RelatedNodes(nodes=[start])
        visited = {node_id}
        queue = deque([(node_id, 0)])

        while queue:
            current, current_depth = queue.popleft()
            if current_depth >= depth:
                continue

            for edge in self.incident_edges(current):
                neighbor = edge.other_endpoint(current)
                if neighbor in visited:
                    continue
                visited.add(neighbor)
                result.edges.append(edge)
                neighbor_node = self._nodes.get(neighbor)
                if neighbor_node is not None:
                    result.nodes.append(neighbor_node)
                queue.append((neighbor, current_depth + 1))

        return result


def find_similar_deals(
    graph: KnowledgeGraph, deal_id: str, limit: int = 10
) -> list[SimilarDeal]:
    return GraphQueryService(graph).find_similar_deals(deal_id, limit=limit)


def get_counterparty_insights(
    graph: KnowledgeGraph, organization_id: str
) -> CounterpartyInsights | None:
    return GraphQueryService(graph).get_counterparty_insights(organization_id)


def get_related_nodes(graph: KnowledgeGraph, node_id: str, depth: int = 1) -> RelatedNodes:
    return GraphQueryService(graph).get_related_nodes(node_id, depth=depth)
