"""
Configuration management for dealgraph.

Loads settings from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DEALGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    json_logs: bool = False

    # ==========================================================================
    # Graph Construction
    # ==========================================================================
    default_organization_id: str = "default"

    # Similarity scoring fan-out. workers=1 scores every pair on the caller's thread.
    similarity_workers: int = Field(default=1, ge=1, description="Threads used for pair scoring")
    similarity_batch_size: int = Field(
        default=64, ge=1, description="Deal rows scored per batch"
    )

    # Run similarity scoring and relationship aggregation side by side
    parallel_stages: bool = False

    # ==========================================================================
    # Statistics
    # ==========================================================================
    path_length_sample_size: int = Field(
        default=100, ge=1, description="BFS sources used for average path length"
    )

    # ==========================================================================
    # Queries
    # ==========================================================================
    default_similar_limit: int = Field(default=10, ge=1)
    default_related_depth: int = Field(default=1, ge=0)

    @property
    def node_types(self) -> list[str]:
        """Valid node types for the knowledge graph."""
        return [
            "deal",
            "term",
            "participant",
            "counterparty",
            "market_condition",
            "outcome",
        ]

    @property
    def edge_types(self) -> list[str]:
        """Valid edge types for the knowledge graph."""
        return [
            "contains",
            "participated_in",
            "resulted_in",
            "influenced_by",
            "similar_to",
            "negotiated_with",
        ]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
