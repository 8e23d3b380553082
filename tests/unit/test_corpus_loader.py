"""Tests for corpus loading and validation."""

import json

import pytest

from dealgraph.errors import CorpusLoadError, DealGraphError
from dealgraph.services.corpus_loader import load_corpus, parse_corpus


RECORD = {
    "id": "d1",
    "dealName": "Acme Refi",
    "dealType": "term_loan",
    "status": "closed",
    "createdAt": "2024-01-01T00:00:00Z",
    "closedAt": "2024-01-31T00:00:00Z",
    "totalValue": 100,
    "participants": [
        {"id": "p1", "partyName": "Bank A", "partyType": "bank",
         "dealRole": "lender", "organizationId": "bank-a"},
    ],
}


class TestParseCorpus:

    def test_list_payload(self):
        deals = parse_corpus([RECORD])
        assert [d.id for d in deals] == ["d1"]
        assert deals[0].closing_days == 30

    def test_object_payload(self):
        assert len(parse_corpus({"deals": [RECORD, {**RECORD, "id": "d2"}]})) == 2

    def test_empty_list(self):
        assert parse_corpus([]) == []

    @pytest.mark.parametrize("payload", [{"records": []}, "deals", 42, None])
    def test_wrong_shape(self, payload):
        with pytest.raises(CorpusLoadError):
            parse_corpus(payload)

    def test_invalid_record_reports_index(self):
        bad = {k: v for k, v in RECORD.items() if k != "dealType"}
        with pytest.raises(CorpusLoadError) as exc_info:
            parse_corpus([RECORD, bad])
        assert exc_info.value.record_index == 1
        assert "index 1" in str(exc_info.value)

    def test_error_is_dealgraph_error(self):
        with pytest.raises(DealGraphError):
            parse_corpus("nope")


class TestLoadCorpus:

    def test_load_file(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps([RECORD]), encoding="utf-8")
        deals = load_corpus(path)
        assert deals[0].participants[0].organization_id == "bank-a"

    def test_accepts_str_path(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps({"deals": [RECORD]}), encoding="utf-8")
        assert len(load_corpus(str(path))) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_corpus(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CorpusLoadError, match="not valid JSON"):
            load_corpus(path)
