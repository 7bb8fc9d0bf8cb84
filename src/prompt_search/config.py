import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    index_prefix: str = os.getenv("INDEX_PREFIX", "prompt_search")

    # Embedding
    embedding_provider: str = os.getenv("EMBEDDING_PROVIDER", "gemini")  # or "ollama", "local"
    embedding_model: str = os.getenv("EMBEDDING_MODEL", "text-embedding-004")
    embedding_dimension: int = int(os.getenv("EMBEDDING_DIMENSION", "768"))

    # Gemini
    gemini_api_key: str | None = os.getenv("GEMINI_API_KEY")
    gemini_base_url: str = os.getenv(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
    )

    # Ollama
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    generation_model: str = os.getenv("GENERATION_MODEL", "llama3.2")

    # Ranking
    ranker_mode: str = os.getenv("RANKER_MODE", "remote")  # or "local"
    default_alpha: float = float(os.getenv("DEFAULT_ALPHA", "0.5"))
    default_match_count: int = int(os.getenv("DEFAULT_MATCH_COUNT", "5"))
    metadata_normalizer: float = float(os.getenv("METADATA_NORMALIZER", "200"))

    # I/O
    io_timeout: float = float(os.getenv("IO_TIMEOUT", "10"))

    # Re-embedding job
    reindex_concurrency: int = int(os.getenv("REINDEX_CONCURRENCY", "4"))
    reindex_interval: float = float(os.getenv("REINDEX_INTERVAL", "0.2"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.embedding_provider not in ("gemini", "ollama", "local"):
            raise ValueError(
                f"EMBEDDING_PROVIDER must be one of ['gemini', 'ollama', 'local'], "
                f"got {self.embedding_provider}"
            )

        if self.ranker_mode not in ("remote", "local"):
            raise ValueError(f"RANKER_MODE must be 'remote' or 'local', got {self.ranker_mode}")

        if self.embedding_dimension <= 0:
            raise ValueError("EMBEDDING_DIMENSION must be positive")

        if self.metadata_normalizer <= 0:
            raise ValueError("METADATA_NORMALIZER must be positive")

        if self.default_match_count <= 0:
            raise ValueError("DEFAULT_MATCH_COUNT must be positive")

        if self.io_timeout <= 0:
            raise ValueError("IO_TIMEOUT must be positive")

        if self.reindex_concurrency < 1:
            raise ValueError("REINDEX_CONCURRENCY must be at least 1")

        if self.reindex_interval < 0:
            raise ValueError("REINDEX_INTERVAL must not be negative")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create an asyncio Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the API process and scripts."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
