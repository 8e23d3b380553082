"""
Graph Builder

Converts an ordered corpus of historical deals into the deterministic
node set and the structural edges (contains, participated_in,
resulted_in, influenced_by) in a single pass.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Sequence

import structlog

from dealgraph.models.graph import (
    CounterpartyNode,
    CounterpartyProperties,
    DealNode,
    DealProperties,
    EdgeType,
    GraphEdge,
    GraphNode,
    MarketConditionNode,
    MarketConditionProperties,
    OutcomeNode,
    OutcomeProperties,
    ParticipantNode,
    ParticipantProperties,
    TermNode,
    TermProperties,
    counterparty_node_id,
    deal_node_id,
    make_edge,
    market_node_id,
    outcome_node_id,
    participant_node_id,
    term_node_id,
)
from dealgraph.models.records import (
    HistoricalDeal,
    HistoricalParticipant,
    HistoricalTerm,
    MarketConditions,
)

logger = structlog.get_logger(__name__)


@dataclass
class CounterpartyAccumulator:
    """
    Running aggregate for one organization during a build pass.

    The first sighting only opens the aggregate. Each later deal bumps
    total_deals and, when it carries a close timestamp, folds its
    closing days into an incremental mean weighted by total_deals.
    """

    organization_id: str
    organization_name: str
    total_deals: int = 1
    avg_closing_time: float | None = None

    def record_deal(self, deal: HistoricalDeal) -> None:
        """Fold one more deal referencing this organization into the aggregate."""
        self.total_deals += 1
        days = deal.closing_days
        if days is None:
            return
        if self.avg_closing_time is None:
            self.avg_closing_time = float(days)
        else:
            n = self.total_deals
            self.avg_closing_time = (self.avg_closing_time * (n - 1) + days) / n

    def to_node(self) -> CounterpartyNode:
        return CounterpartyNode(
            id=counterparty_node_id(self.organization_id),
            label=self.organization_name,
            properties=CounterpartyProperties(
                organization_name=self.organization_name,
                total_deals=self.total_deals,
                avg_closing_time=self.avg_closing_time,
            ),
        )


@dataclass(frozen=True)
class BuildResult:
    """Frozen output of the builder pass."""

    nodes: tuple[GraphNode, ...]
    edges: tuple[GraphEdge, ...]
    deal_nodes: tuple[DealNode, ...]
    counterparties: Mapping[str, CounterpartyNode] = field(
        default_factory=lambda: MappingProxyType({})
    )
    # Records kept after repeated deal ids were dropped, in corpus order
    records: tuple[HistoricalDeal, ...] = ()


class GraphBuilder:
    """
    Builds graph nodes and structural edges from historical deals.

    Identity maps and counterparty accumulators live only for the
    duration of one build() call.
    """

    def __init__(self, timestamp: datetime | None = None):
        self.timestamp = timestamp

    def build(self, deals: Sequence[HistoricalDeal]) -> BuildResult:
        """
        Run the single ordered pass over the corpus.

        Args:
            deals: Historical deal records, in corpus order.

        Returns:
            BuildResult with nodes, structural edges, deal nodes and the
            organization id -> counterparty node map.
        """
        timestamp = self.timestamp or datetime.now(timezone.utc)
        nodes: dict[str, GraphNode] = {}
        edges: dict[str, GraphEdge] = {}
        deal_nodes: list[DealNode] = []
        records: list[HistoricalDeal] = []
        accumulators: dict[str, CounterpartyAccumulator] = {}

        def add_edge(source: str, target: str, edge_type: EdgeType) -> None:
            edge = make_edge(source, target, edge_type, timestamp=timestamp)
            edges[edge.id] = edge

        for deal in deals:
            deal_node = self._deal_node(deal)
            # First record wins for a repeated deal id
            if deal_node.id in nodes:
                logger.warning("duplicate_deal_skipped", deal_id=deal.id)
                continue
            nodes[deal_node.id] = deal_node
            deal_nodes.append(deal_node)
            records.append(deal)

            for term in deal.terms:
                term_id = term_node_id(deal.id, term.term_key)
                if term_id not in nodes:
                    nodes[term_id] = self._term_node(term, deal.id)
                add_edge(deal_node.id, term_id, EdgeType.CONTAINS)

            for participant in deal.participants:
                participant_id = participant_node_id(participant.id)
                if participant_id not in nodes:
                    nodes[participant_id] = self._participant_node(participant)
                add_edge(participant_id, deal_node.id, EdgeType.PARTICIPATED_IN)

            self._track_counterparties(deal, accumulators)

            if deal.is_resolved:
                outcome = self._outcome_node(deal)
                nodes[outcome.id] = outcome
                add_edge(deal_node.id, outcome.id, EdgeType.RESULTED_IN)

            if deal.market_conditions is not None:
                market_id = market_node_id(deal.month_bucket)
                if market_id not in nodes:
                    nodes[market_id] = self._market_node(
                        deal.market_conditions, deal.month_bucket, deal.created_at
                    )
                add_edge(deal_node.id, market_id, EdgeType.INFLUENCED_BY)

        counterparties = {
            org_id: acc.to_node() for org_id, acc in accumulators.items()
        }
        for counterparty in counterparties.values():
            nodes[counterparty.id] = counterparty

        logger.debug(
            "graph_structure_built",
            deals=len(deal_nodes),
            nodes=len(nodes),
            edges=len(edges),
            counterparties=len(counterparties),
        )

        return BuildResult(
            nodes=tuple(nodes.values()),
            edges=tuple(edges.values()),
            deal_nodes=tuple(deal_nodes),
            counterparties=MappingProxyType(counterparties),
            records=tuple(records),
        )

    def _track_counterparties(
        self,
        deal: HistoricalDeal,
        accumulators: dict[str, CounterpartyAccumulator],
    ) -> None:
        """Create or update one accumulator per distinct organization on the deal."""
        names: dict[str, str] = {}
        for participant in deal.participants:
            if participant.organization_id:
                names.setdefault(participant.organization_id, participant.party_name)

        for org_id, name in names.items():
            accumulator = accumulators.get(org_id)
            if accumulator is None:
                accumulator = CounterpartyAccumulator(
                    organization_id=org_id, organization_name=name
                )
                accumulators[org_id] = accumulator
            else:
                accumulator.record_deal(deal)

    # =========================================================================
    # Node factories
    # =========================================================================

    @staticmethod
    def _deal_node(deal: HistoricalDeal) -> DealNode:
        return DealNode(
            id=deal_node_id(deal.id),
            label=deal.deal_name,
            properties=DealProperties(
                deal_name=deal.deal_name,
                deal_type=deal.deal_type,
                status=deal.status,
                closed_at=deal.closed_at,
                total_value=deal.total_value,
                duration=deal.closing_days,
                round_count=deal.negotiation_rounds,
                success_score=deal.success_score,
                industry=deal.industry,
                borrower_profile=deal.borrower_profile,
            ),
        )

    @staticmethod
    def _term_node(term: HistoricalTerm, deal_id: str) -> TermNode:
        return TermNode(
            id=term_node_id(deal_id, term.term_key),
            label=term.term_label,
            properties=TermProperties(
                term_key=term.term_key,
                term_label=term.term_label,
                value_type=term.value_type,
                final_value=term.final_value,
                initial_value=term.initial_value,
                negotiation_rounds=term.negotiation_rounds,
                was_contentious=term.was_contentious,
                category=term.category,
            ),
        )

    @staticmethod
    def _participant_node(participant: HistoricalParticipant) -> ParticipantNode:
        return ParticipantNode(
            id=participant_node_id(participant.id),
            label=participant.party_name,
            properties=ParticipantProperties(
                party_name=participant.party_name,
                party_type=participant.party_type,
                deal_role=participant.deal_role,
                organization_id=participant.organization_id,
            ),
        )

    @staticmethod
    def _outcome_node(deal: HistoricalDeal) -> OutcomeNode:
        closed = deal.status == "closed"
        return OutcomeNode(
            id=outcome_node_id(deal.id),
            label=f"Outcome: {deal.status}",
            properties=OutcomeProperties(
                deal_id=deal.id,
                outcome_type="closed" if closed else "terminated",
                closing_time=deal.closing_days,
                final_margin=deal.final_margin,
                counterparty_acceptance=closed,
                post_closing_performance=deal.post_closing_score,
            ),
        )

    @staticmethod
    def _market_node(
        conditions: MarketConditions, month_bucket: str, timestamp: datetime
    ) -> MarketConditionNode:
        return MarketConditionNode(
            id=market_node_id(month_bucket),
            label=f"Market {month_bucket}",
            properties=MarketConditionProperties(
                timestamp=timestamp,
                avg_margin=conditions.avg_margin,
                avg_leverage=conditions.avg_leverage,
                market_volatility=conditions.market_volatility,
                deal_volume=conditions.deal_volume,
                economic_indicator=conditions.economic_indicator,
            ),
        )
