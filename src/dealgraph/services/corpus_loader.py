"""
Historical deal corpus loading.

Reads deal records from JSON and validates them at the boundary, so
malformed records are rejected before they reach graph construction.
"""

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from dealgraph.errors import CorpusLoadError
from dealgraph.models.records import HistoricalDeal

logger = structlog.get_logger(__name__)


def parse_corpus(payload: Any) -> list[HistoricalDeal]:
    """
    Validate a decoded corpus payload.

    Accepts either a list of deal records or an object with a ``deals`` list.
    """
    if isinstance(payload, dict):
        payload = payload.get("deals")
    if not isinstance(payload, list):
        raise CorpusLoadError("Corpus must be a list of deals or an object with a 'deals' list")

    deals = []
    for index, record in enumerate(payload):
        try:
            deals.append(HistoricalDeal.model_validate(record))
        except ValidationError as e:
            raise CorpusLoadError(
                f"Invalid deal record at index {index}: {e}", record_index=index
            ) from e
    return deals


def load_corpus(file_path: Path | str) -> list[HistoricalDeal]:
    """Load and validate a JSON corpus file."""
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Corpus file not found: {file_path}")

    try:
        payload = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CorpusLoadError(f"Corpus file is not valid JSON: {file_path}: {e}") from e

    deals = parse_corpus(payload)

    logger.info(
        "corpus_loaded",
        filename=file_path.name,
        deals=len(deals),
    )
    return deals
