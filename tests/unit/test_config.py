"""Tests for dealgraph configuration."""

import pytest
from pydantic import ValidationError

from dealgraph.config import Settings, get_settings


class TestSettings:

    def test_defaults(self, settings):
        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.json_logs is False
        assert settings.default_organization_id == "default"
        assert settings.similarity_workers == 1
        assert settings.similarity_batch_size == 64
        assert settings.parallel_stages is False
        assert settings.path_length_sample_size == 100
        assert settings.default_similar_limit == 10
        assert settings.default_related_depth == 1

    def test_graph_vocabulary(self, settings):
        assert len(settings.node_types) == 6
        assert "market_condition" in settings.node_types
        assert len(settings.edge_types) == 6
        assert "negotiated_with" in settings.edge_types

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DEALGRAPH_SIMILARITY_WORKERS", "4")
        monkeypatch.setenv("DEALGRAPH_PARALLEL_STAGES", "true")
        monkeypatch.setenv("DEALGRAPH_ENVIRONMENT", "production")
        settings = Settings(_env_file=None)
        assert settings.similarity_workers == 4
        assert settings.parallel_stages is True
        assert settings.environment == "production"

    def test_unprefixed_env_ignored(self, monkeypatch):
        monkeypatch.setenv("SIMILARITY_WORKERS", "8")
        assert Settings(_env_file=None).similarity_workers == 1

    @pytest.mark.parametrize("field,value", [
        ("similarity_workers", 0),
        ("similarity_batch_size", 0),
        ("path_length_sample_size", 0),
        ("default_related_depth", -1),
    ])
    def test_bounds(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_unknown_environment_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="qa")


class TestGetSettings:

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_cache_clear_rereads_env(self, monkeypatch):
        get_settings()
        monkeypatch.setenv("DEALGRAPH_DEFAULT_ORGANIZATION_ID", "acme")
        get_settings.cache_clear()
        assert get_settings().default_organization_id == "acme"
