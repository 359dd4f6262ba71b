"""
Configuration module for the Anime Series Timeline Engine.
Uses Pydantic for validation and environment variable loading.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
import logging

class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Neo4j Settings
    neo4j_uri: str = Field(default="bolt://localhost:7687")
    neo4j_user: str = Field(default="neo4j")
    neo4j_password: str = Field(default="")
    neo4j_database: Optional[str] = Field(default=None)

    # Environment
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Traversal Settings
    # Also bounds cycle tracing, which walks the visited adjacency once per back-reference
    max_traversal_nodes: Optional[int] = Field(default=5000, ge=0)

    # Paths
    graph_file: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


class LogConfig:
    """Logging configuration."""

    @staticmethod
    def setup_logging(level: str = "INFO") -> logging.Logger:
        """Set up logging configuration."""
        log_level = getattr(logging, level.upper(), logging.INFO)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)

        # Root logger
        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        root_logger.addHandler(console_handler)

        # Suppress noisy loggers
        logging.getLogger("neo4j").setLevel(logging.WARNING)

        return root_logger


# Graph Schema Definition (property names read by the Neo4j store)
GRAPH_SCHEMA = {
    "nodes": {
        "Anime": [
            "mal_id", "title", "title_english", "title_japanese", "image_url",
            "rating", "premiere_date", "num_episodes", "episode_duration",
            "anime_type", "status", "source", "studios", "genres"
        ]
    },
    "relationships": {
        "RELATED_TO": {"from": "Anime", "to": "Anime", "properties": ["relationship_type", "created_at"]}
    }
}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)
