"""
Similarity Engine

Scores every unordered pair of deal nodes with a weighted four-factor
similarity and materializes a similar_to edge for pairs at or above the
threshold. Pair scoring shares no mutable state, so row batches can run
on a thread pool and be concatenated in order.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Sequence

import structlog

from dealgraph.models.graph import DealNode, EdgeType, SimilarToEdge, make_edge

logger = structlog.get_logger(__name__)

SIMILARITY_THRESHOLD = 0.6

DEAL_TYPE_WEIGHT = 0.30
INDUSTRY_WEIGHT = 0.25
BORROWER_PROFILE_WEIGHT = 0.25
TOTAL_VALUE_WEIGHT = 0.20

# Minimum min/max ratio for the total value factor to contribute
TOTAL_VALUE_MIN_RATIO = 0.7

# Every factor's weight is counted, whether or not its data was present
WEIGHT_TOTAL = (
    DEAL_TYPE_WEIGHT + INDUSTRY_WEIGHT + BORROWER_PROFILE_WEIGHT + TOTAL_VALUE_WEIGHT
)


def _value_ratio(a: float | None, b: float | None) -> float | None:
    if not a or not b or a <= 0 or b <= 0:
        return None
    return min(a, b) / max(a, b)


def score_deal_pair(deal_a: DealNode, deal_b: DealNode) -> float:
    """
    Weighted similarity between two deals in [0, 1].

    Factors:
        same deal type        0.30
        same industry         0.25
        same borrower profile 0.25
        total value ratio     0.20 * ratio, when ratio >= 0.7

    Categorical factors compare values as-is, so two deals both missing
    an industry (or borrower profile) count as matching on it.
    """
    a = deal_a.properties
    b = deal_b.properties
    score = 0.0

    if a.deal_type == b.deal_type:
        score += DEAL_TYPE_WEIGHT
    if a.industry == b.industry:
        score += INDUSTRY_WEIGHT
    if a.borrower_profile == b.borrower_profile:
        score += BORROWER_PROFILE_WEIGHT

    ratio = _value_ratio(a.total_value, b.total_value)
    if ratio is not None and ratio >= TOTAL_VALUE_MIN_RATIO:
        score += TOTAL_VALUE_WEIGHT * ratio

    # round() absorbs float drift so identical deals score exactly 1.0
    return min(1.0, max(0.0, round(score / WEIGHT_TOTAL, 10)))


class SimilarityEngine:
    """Computes similar_to edges across a set of deal nodes."""

    def __init__(
        self,
        workers: int = 1,
        batch_size: int = 64,
        timestamp: datetime | None = None,
    ):
        if workers < 1:
            raise ValueError("workers must be >= 1")
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.workers = workers
        self.batch_size = batch_size
        self.timestamp = timestamp

    def compute(self, deals: Sequence[DealNode]) -> list[SimilarToEdge]:
        """
        Score all unordered pairs and return edges above the threshold.

        Output order matches a sequential (i, j > i) scan regardless of
        the number of workers.
        """
        deals = tuple(deals)
        batches = [
            range(start, min(start + self.batch_size, len(deals)))
            for start in range(0, len(deals), self.batch_size)
        ]

        if self.workers == 1 or len(batches) <= 1:
            results = [self._score_rows(deals, rows) for rows in batches]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                results = list(pool.map(lambda rows: self._score_rows(deals, rows), batches))

        edges = [edge for batch in results for edge in batch]

        logger.info(
            "similarity_computed",
            deals=len(deals),
            pairs=len(deals) * (len(deals) - 1) // 2,
            edges=len(edges),
            batches=len(batches),
            workers=self.workers,
        )
        return edges

    def _score_rows(
        self, deals: tuple[DealNode, ...], rows: range
    ) -> list[SimilarToEdge]:
        edges: list[SimilarToEdge] = []
        for i in rows:
            for j in range(i + 1, len(deals)):
                similarity = score_deal_pair(deals[i], deals[j])
                if similarity >= SIMILARITY_THRESHOLD:
                    edges.append(
                        make_edge(
                            deals[i].id,
                            deals[j].id,
                            EdgeType.SIMILAR_TO,
                            timestamp=self.timestamp,
                            weight=similarity,
                        )
                    )
        return edges
