"""
Knowledge graph node, edge and container models.

Nodes and edges are tagged unions discriminated on ``type``: every node
kind carries its own typed property model, so a property access is only
valid against the kind it belongs to. All models are frozen; a finished
KnowledgeGraph is never mutated, only rebuilt.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class NodeType(str, Enum):
    """Node kinds in the deal knowledge graph."""

    DEAL = "deal"
    TERM = "term"
    PARTICIPANT = "participant"
    COUNTERPARTY = "counterparty"
    MARKET_CONDITION = "market_condition"
    OUTCOME = "outcome"


class EdgeType(str, Enum):
    """Edge kinds in the deal knowledge graph."""

    CONTAINS = "contains"  # Deal -> Term
    PARTICIPATED_IN = "participated_in"  # Participant -> Deal
    RESULTED_IN = "resulted_in"  # Deal -> Outcome
    INFLUENCED_BY = "influenced_by"  # Deal -> MarketCondition
    SIMILAR_TO = "similar_to"  # Deal <-> Deal
    NEGOTIATED_WITH = "negotiated_with"  # Counterparty <-> Counterparty


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# Identity
# =============================================================================


def deal_node_id(deal_id: str) -> str:
    return f"deal-{deal_id}"


def term_node_id(deal_id: str, term_key: str) -> str:
    return f"term-{deal_id}-{term_key}"


def participant_node_id(participant_id: str) -> str:
    return f"participant-{participant_id}"


def counterparty_node_id(organization_id: str) -> str:
    return f"counterparty-{organization_id}"


def market_node_id(month_bucket: str) -> str:
    return f"market-{month_bucket}"


def outcome_node_id(deal_id: str) -> str:
    return f"outcome-{deal_id}"


def edge_id(source: str, target: str, edge_type: EdgeType) -> str:
    return f"edge-{source}-{target}-{edge_type.value}"


# =============================================================================
# Node properties
# =============================================================================


class DealProperties(_Frozen):
    deal_name: str
    deal_type: str
    status: str
    closed_at: datetime | None = None
    total_value: float | None = None
    duration: int | None = Field(default=None, description="Days from creation to close")
    round_count: int | None = None
    success_score: float | None = None
    industry: str | None = None
    borrower_profile: str | None = None


class TermProperties(_Frozen):
    term_key: str
    term_label: str
    value_type: str
    final_value: Any = None
    initial_value: Any = None
    negotiation_rounds: int | None = None
    was_contentious: bool | None = None
    category: str | None = None


class ParticipantProperties(_Frozen):
    party_name: str
    party_type: str
    deal_role: str
    organization_id: str | None = None


class AcceptancePattern(_Frozen):
    """How a counterparty tends to respond to a given term."""

    term_key: str
    acceptance_rate: float = Field(ge=0.0, le=1.0)
    avg_rounds: float | None = None


class CounterpartyProperties(_Frozen):
    organization_name: str
    total_deals: int = Field(ge=1)
    avg_closing_time: float | None = None
    # Populated outside the builder
    acceptance_patterns: list[AcceptancePattern] = Field(default_factory=list)
    preferred_term_structures: list[str] = Field(default_factory=list)
    negotiation_style: Literal["aggressive", "collaborative", "cautious"] = "collaborative"


class MarketConditionProperties(_Frozen):
    timestamp: datetime
    avg_margin: float
    avg_leverage: float
    market_volatility: float
    deal_volume: float
    economic_indicator: str | None = None


class OutcomeProperties(_Frozen):
    deal_id: str
    outcome_type: Literal["closed", "terminated"]
    closing_time: int | None = None
    final_margin: float | None = None
    counterparty_acceptance: bool
    post_closing_performance: float | None = None


# =============================================================================
# Nodes
# =============================================================================


class _NodeBase(_Frozen):
    id: str = Field(..., description="Deterministic node identifier")
    label: str = Field(..., description="Human-readable label")


class DealNode(_NodeBase):
    type: Literal[NodeType.DEAL] = NodeType.DEAL
    properties: DealProperties


class TermNode(_NodeBase):
    type: Literal[NodeType.TERM] = NodeType.TERM
    properties: TermProperties


class ParticipantNode(_NodeBase):
    type: Literal[NodeType.PARTICIPANT] = NodeType.PARTICIPANT
    properties: ParticipantProperties


class CounterpartyNode(_NodeBase):
    type: Literal[NodeType.COUNTERPARTY] = NodeType.COUNTERPARTY
    properties: CounterpartyProperties


class MarketConditionNode(_NodeBase):
    type: Literal[NodeType.MARKET_CONDITION] = NodeType.MARKET_CONDITION
    properties: MarketConditionProperties


class OutcomeNode(_NodeBase):
    type: Literal[NodeType.OUTCOME] = NodeType.OUTCOME
    properties: OutcomeProperties


GraphNode = Annotated[
    Union[
        DealNode,
        TermNode,
        ParticipantNode,
        CounterpartyNode,
        MarketConditionNode,
        OutcomeNode,
    ],
    Field(discriminator="type"),
]


# =============================================================================
# Edges
# =============================================================================


class NegotiationStats(_Frozen):
    """Co-participation statistics for a pair of counterparties."""

    deal_count: int = Field(ge=1)
    avg_negotiation_rounds: float
    success_rate: float = Field(ge=0.0, le=1.0)
    avg_closing_days: float
    common_sticking_points: list[str] = Field(default_factory=list, max_length=5)


class _EdgeBase(_Frozen):
    id: str
    source: str
    target: str
    timestamp: datetime | None = None

    def other_endpoint(self, node_id: str) -> str | None:
        """The endpoint opposite node_id, treating the edge as undirected."""
        if self.source == node_id:
            return self.target
        if self.target == node_id:
            return self.source
        return None


class ContainsEdge(_EdgeBase):
    type: Literal[EdgeType.CONTAINS] = EdgeType.CONTAINS
    weight: float = 1.0
    properties: dict[str, Any] | None = None


class ParticipatedInEdge(_EdgeBase):
    type: Literal[EdgeType.PARTICIPATED_IN] = EdgeType.PARTICIPATED_IN
    weight: float = 1.0
    properties: dict[str, Any] | None = None


class ResultedInEdge(_EdgeBase):
    type: Literal[EdgeType.RESULTED_IN] = EdgeType.RESULTED_IN
    weight: float = 1.0
    properties: dict[str, Any] | None = None


class InfluencedByEdge(_EdgeBase):
    type: Literal[EdgeType.INFLUENCED_BY] = EdgeType.INFLUENCED_BY
    weight: float = 0.8
    properties: dict[str, Any] | None = None


class SimilarToEdge(_EdgeBase):
    type: Literal[EdgeType.SIMILAR_TO] = EdgeType.SIMILAR_TO
    weight: float = Field(..., ge=0.0, le=1.0)
    properties: dict[str, Any] | None = None


class NegotiatedWithEdge(_EdgeBase):
    type: Literal[EdgeType.NEGOTIATED_WITH] = EdgeType.NEGOTIATED_WITH
    weight: float = Field(..., ge=0.0, le=1.0)
    properties: NegotiationStats


GraphEdge = Annotated[
    Union[
        ContainsEdge,
        ParticipatedInEdge,
        ResultedInEdge,
        InfluencedByEdge,
        SimilarToEdge,
        NegotiatedWithEdge,
    ],
    Field(discriminator="type"),
]

_EDGE_CLASSES: dict[EdgeType, type[_EdgeBase]] = {
    EdgeType.CONTAINS: ContainsEdge,
    EdgeType.PARTICIPATED_IN: ParticipatedInEdge,
    EdgeType.RESULTED_IN: ResultedInEdge,
    EdgeType.INFLUENCED_BY: InfluencedByEdge,
    EdgeType.SIMILAR_TO: SimilarToEdge,
    EdgeType.NEGOTIATED_WITH: NegotiatedWithEdge,
}


def make_edge(
    source: str,
    target: str,
    edge_type: EdgeType,
    timestamp: datetime | None = None,
    **fields: Any,
) -> GraphEdge:
    """
    Create an edge with its deterministic id.

    Fixed-weight kinds take their default weight; similar_to and
    negotiated_with require ``weight`` (and ``properties`` for the latter).
    """
    edge_cls = _EDGE_CLASSES[edge_type]
    return edge_cls(
        id=edge_id(source, target, edge_type),
        source=source,
        target=target,
        timestamp=timestamp,
        **fields,
    )


# =============================================================================
# Graph container
# =============================================================================


class GraphCluster(_Frozen):
    """A named cohort of deal nodes sharing deal type and status."""

    id: str
    label: str
    deal_type: str
    status: str
    node_ids: list[str] = Field(default_factory=list)
    characteristics: list[str] = Field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.node_ids)


class CentralNode(_Frozen):
    node_id: str
    score: float


class GraphStatistics(_Frozen):
    """Structural statistics of a finished graph."""

    avg_degree: float = 0.0
    density: float = 0.0
    clustering_coefficient: float = 0.0
    avg_path_length: float = 0.0
    top_central_nodes: list[CentralNode] = Field(default_factory=list)


class GraphMetadata(_Frozen):
    created_at: datetime
    updated_at: datetime
    node_count: int = 0
    edge_count: int = 0
    clusters: list[GraphCluster] = Field(default_factory=list)
    statistics: GraphStatistics = Field(default_factory=GraphStatistics)


class KnowledgeGraph(_Frozen):
    """
    Complete, immutable deal knowledge graph.

    Produced once per build; consumers only read it. A changed corpus
    means a new build, never an in-place update.
    """

    id: str
    organization_id: str
    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()
    metadata: GraphMetadata

    def get_node(self, node_id: str) -> GraphNode | None:
        """Get a node by ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def nodes_of_type(self, node_type: NodeType) -> list[GraphNode]:
        return [node for node in self.nodes if node.type == node_type]

    def edges_of_type(self, edge_type: EdgeType) -> list[GraphEdge]:
        return [edge for edge in self.edges if edge.type == edge_type]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return self.model_dump(mode="json")
