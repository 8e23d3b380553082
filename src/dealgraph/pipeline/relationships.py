"""
Relationship Aggregator

Aggregates co-participation statistics for every pair of organizations
that appear on the same deal across the whole corpus, then emits one
negotiated_with edge per pair of known counterparties.
"""

from dataclasses import dataclass, field
from datetime import datetime
from itertools import combinations
from typing import Mapping, Sequence

import structlog

from dealgraph.models.graph import (
    CounterpartyNode,
    EdgeType,
    NegotiatedWithEdge,
    NegotiationStats,
    counterparty_node_id,
    make_edge,
)
from dealgraph.models.records import HistoricalDeal

logger = structlog.get_logger(__name__)

MAX_STICKING_POINTS = 5

OrganizationPair = tuple[str, str]


@dataclass
class RelationshipTally:
    """Additive co-participation counters for one organization pair."""

    deal_count: int = 0
    total_rounds: int = 0
    success_count: int = 0
    total_days: int = 0
    sticking_points: list[str] = field(default_factory=list)

    def add_deal(self, deal: HistoricalDeal) -> None:
        self.deal_count += 1
        self.total_rounds += deal.negotiation_rounds or 0
        if deal.status == "closed":
            self.success_count += 1
            if deal.closing_days is not None:
                self.total_days += deal.closing_days
        self.sticking_points.extend(deal.sticking_points)

    def merge(self, other: "RelationshipTally") -> "RelationshipTally":
        """Fold another shard's tally into this one."""
        self.deal_count += other.deal_count
        self.total_rounds += other.total_rounds
        self.success_count += other.success_count
        self.total_days += other.total_days
        self.sticking_points.extend(other.sticking_points)
        return self

    def to_stats(self) -> NegotiationStats:
        distinct = list(dict.fromkeys(self.sticking_points))
        return NegotiationStats(
            deal_count=self.deal_count,
            avg_negotiation_rounds=self.total_rounds / self.deal_count,
            success_rate=self.success_count / self.deal_count,
            avg_closing_days=(
                self.total_days / self.success_count if self.success_count > 0 else 0.0
            ),
            common_sticking_points=distinct[:MAX_STICKING_POINTS],
        )


def tally_relationships(
    deals: Sequence[HistoricalDeal],
) -> dict[OrganizationPair, RelationshipTally]:
    """Accumulate tallies keyed by the sorted organization id pair."""
    tallies: dict[OrganizationPair, RelationshipTally] = {}
    for deal in deals:
        for org_a, org_b in combinations(deal.organization_ids(), 2):
            key = (org_a, org_b) if org_a <= org_b else (org_b, org_a)
            tally = tallies.get(key)
            if tally is None:
                tally = tallies[key] = RelationshipTally()
            tally.add_deal(deal)
    return tallies


def merge_tallies(
    shards: Sequence[Mapping[OrganizationPair, RelationshipTally]],
) -> dict[OrganizationPair, RelationshipTally]:
    """Merge per-shard tallies in shard order."""
    merged: dict[OrganizationPair, RelationshipTally] = {}
    for shard in shards:
        for key, tally in shard.items():
            if key in merged:
                merged[key].merge(tally)
            else:
                merged[key] = RelationshipTally().merge(tally)
    return merged


class RelationshipAggregator:
    """Builds negotiated_with edges from corpus-wide co-participation."""

    def __init__(self, timestamp: datetime | None = None):
        self.timestamp = timestamp

    def aggregate(
        self,
        deals: Sequence[HistoricalDeal],
        counterparties: Mapping[str, CounterpartyNode],
    ) -> list[NegotiatedWithEdge]:
        """
        Aggregate relationships across the corpus.

        Args:
            deals: The full historical corpus, in corpus order.
            counterparties: Organization id -> counterparty node from the builder.

        Returns:
            One negotiated_with edge per pair of known counterparties.
        """
        return self.emit(tally_relationships(deals), counterparties, len(deals))

    def emit(
        self,
        tallies: Mapping[OrganizationPair, RelationshipTally],
        counterparties: Mapping[str, CounterpartyNode],
        corpus_size: int,
    ) -> list[NegotiatedWithEdge]:
        edges: list[NegotiatedWithEdge] = []
        skipped = 0

        for (org_a, org_b), tally in tallies.items():
            if org_a not in counterparties or org_b not in counterparties:
                skipped += 1
                continue
            edges.append(
                make_edge(
                    counterparty_node_id(org_a),
                    counterparty_node_id(org_b),
                    EdgeType.NEGOTIATED_WITH,
                    timestamp=self.timestamp,
                    weight=tally.deal_count / corpus_size,
                    properties=tally.to_stats(),
                )
            )

        logger.info(
            "relationships_aggregated",
            pairs=len(tallies),
            edges=len(edges),
            skipped_unknown=skipped,
        )
        return edges
