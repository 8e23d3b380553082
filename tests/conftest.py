"""Shared pytest fixtures for the dealgraph test suite."""

from datetime import datetime, timedelta, timezone

import pytest
import structlog

from dealgraph.config import Settings, get_settings
from dealgraph.models.records import (
    HistoricalDeal,
    HistoricalParticipant,
    HistoricalTerm,
    MarketConditions,
)


# ---------------------------------------------------------------------------
# Singleton cache clearing (autouse)
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clear_singletons():
    """Clear cached settings and structlog config between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------

BASE_TIME = datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc)


def make_participant(pid, org=None, name=None, role="lender"):
    return HistoricalParticipant(
        id=pid,
        party_name=name or f"Party {pid}",
        party_type="bank",
        deal_role=role,
        organization_id=org,
    )


def make_term(key, label=None, rounds=None, contentious=None):
    return HistoricalTerm(
        term_key=key,
        term_label=label or key.replace("_", " ").title(),
        value_type="percentage",
        final_value=4.25,
        initial_value=4.75,
        negotiation_rounds=rounds,
        was_contentious=contentious,
        category="pricing",
    )


def make_deal(
    deal_id,
    *,
    deal_type="term_loan",
    status="closed",
    industry="retail",
    borrower_profile="sponsor_backed",
    total_value=100.0,
    created_at=BASE_TIME,
    closing_days=30,
    negotiation_rounds=None,
    sticking_points=None,
    terms=None,
    participants=None,
    market=None,
):
    closed_at = created_at + timedelta(days=closing_days) if closing_days is not None else None
    return HistoricalDeal(
        id=deal_id,
        deal_name=f"Deal {deal_id}",
        deal_type=deal_type,
        status=status,
        created_at=created_at,
        closed_at=closed_at,
        total_value=total_value,
        negotiation_rounds=negotiation_rounds,
        industry=industry,
        borrower_profile=borrower_profile,
        sticking_points=sticking_points or [],
        terms=terms or [],
        participants=participants or [],
        market_conditions=market,
    )


def make_market(volatility=0.2):
    return MarketConditions(
        avg_margin=3.5,
        avg_leverage=4.2,
        market_volatility=volatility,
        deal_volume=120.0,
        economic_indicator="expansion",
    )


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def deal_factory():
    return make_deal


@pytest.fixture
def participant_factory():
    return make_participant


@pytest.fixture
def term_factory():
    return make_term


@pytest.fixture
def market_factory():
    return make_market


@pytest.fixture
def settings():
    """Settings isolated from the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def two_deal_corpus():
    """Two closed term loans, same cohort, one participant each from Org1."""
    return [
        make_deal(
            "X", total_value=100.0,
            participants=[make_participant("p-x", org="Org1", name="Org One")],
        ),
        make_deal(
            "Y", total_value=90.0,
            participants=[make_participant("p-y", org="Org1", name="Org One")],
        ),
    ]


@pytest.fixture
def relationship_corpus():
    """Three deals; A and B co-participate in two, only the first closed."""
    return [
        make_deal(
            "d1", status="closed", negotiation_rounds=4, closing_days=20,
            sticking_points=["leverage", "pricing"],
            participants=[make_participant("a1", org="A"), make_participant("b1", org="B")],
        ),
        make_deal(
            "d2", status="open", negotiation_rounds=6, closing_days=None,
            sticking_points=["pricing", "covenants"],
            participants=[make_participant("a2", org="A"), make_participant("b2", org="B")],
        ),
        make_deal(
            "d3", status="open", negotiation_rounds=2, closing_days=None,
            participants=[make_participant("c1", org="C")],
        ),
    ]


@pytest.fixture
def mixed_corpus():
    """Five deals exercising terms, markets, outcomes and relationships."""
    march = BASE_TIME
    april = BASE_TIME + timedelta(days=30)
    return [
        make_deal(
            "d1", created_at=march, negotiation_rounds=3,
            terms=[make_term("margin", rounds=2, contentious=True), make_term("tenor")],
            participants=[
                make_participant("p1", org="bank-a", name="Bank A"),
                make_participant("p2", org="fund-b", name="Fund B", role="borrower"),
            ],
            market=make_market(),
        ),
        make_deal(
            "d2", created_at=march + timedelta(days=5), total_value=95.0,
            terms=[make_term("margin")],
            participants=[
                make_participant("p1", org="bank-a", name="Bank A"),
                make_participant("p3", org="fund-b", name="Fund B Holdings"),
            ],
            market=make_market(volatility=0.9),
        ),
        make_deal(
            "d3", deal_type="revolver", status="terminated", industry="energy",
            borrower_profile="corporate", total_value=400.0, created_at=april,
            participants=[make_participant("p4", org="bank-c", name="Bank C")],
            market=make_market(),
        ),
        make_deal(
            "d4", deal_type="revolver", status="open", industry="energy",
            borrower_profile="corporate", total_value=380.0, created_at=april,
            closing_days=None,
            participants=[make_participant("p5")],
        ),
        make_deal(
            "d5", deal_type="term_loan", status="closed", total_value=None,
            participants=[
                make_participant("p6", org="bank-c", name="Bank C"),
                make_participant("p1", org="bank-a", name="Bank A"),
            ],
        ),
    ]
