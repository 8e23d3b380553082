"""
Historical deal records consumed by the graph builder.

These are the corpus boundary: required fields are enforced here by
pydantic, so the pipeline never re-validates them. Records accept both
snake_case and the camelCase keys used by the upstream persistence layer.
"""

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CLOSED_STATUSES = frozenset({"closed", "terminated"})

SECONDS_PER_DAY = 60 * 60 * 24


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, rounded up."""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class MarketConditions(_Record):
    """Market snapshot recorded alongside a deal."""

    avg_margin: float
    avg_leverage: float
    market_volatility: float
    deal_volume: float
    economic_indicator: str | None = None


class HistoricalTerm(_Record):
    """A single negotiated term within a historical deal."""

    term_key: str
    term_label: str
    value_type: str
    final_value: Any = None
    initial_value: Any = None
    negotiation_rounds: int | None = None
    was_contentious: bool | None = None
    category: str | None = None


class HistoricalParticipant(_Record):
    """A party that took part in a historical deal."""

    id: str
    party_name: str
    party_type: str
    deal_role: str
    organization_id: str | None = None


class HistoricalDeal(_Record):
    """
    A completed or in-flight negotiated deal.

    The primary input record of the graph builder.
    """

    id: str
    deal_name: str
    deal_type: str
    status: str
    created_at: datetime
    closed_at: datetime | None = None

    total_value: float | None = None
    final_margin: float | None = None
    synergy_value: float | None = None

    negotiation_rounds: int | None = None
    success_score: float | None = None
    post_closing_score: float | None = None

    industry: str | None = None
    borrower_profile: str | None = None
    sticking_points: list[str] = Field(default_factory=list)

    terms: list[HistoricalTerm] = Field(default_factory=list)
    participants: list[HistoricalParticipant] = Field(default_factory=list)
    market_conditions: MarketConditions | None = None

    @property
    def closing_days(self) -> int | None:
        """Days from creation to close, or None while the deal is open."""
        if self.closed_at is None:
            return None
        return days_between(self.created_at, self.closed_at)

    @property
    def is_resolved(self) -> bool:
        """Whether the deal reached a final closed or terminated state."""
        return self.status in CLOSED_STATUSES

    @property
    def month_bucket(self) -> str:
        """Calendar month of creation, YYYY-MM."""
        return self.created_at.strftime("%Y-%m")

    def organization_ids(self) -> list[str]:
        """Distinct participant organization ids in order of first appearance."""
        seen: dict[str, None] = {}
        for participant in self.participants:
            if participant.organization_id:
                seen.setdefault(participant.organization_id, None)
        return list(seen)
