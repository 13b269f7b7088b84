import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Cache
    cache_namespace: str = os.getenv("CACHE_NAMESPACE", "cloud-integration")
    cache_default_ttl: int = int(os.getenv("CACHE_DEFAULT_TTL", "3600"))  # 1 hour default

    # Reference IDs
    id_default_prefix: str = os.getenv("ID_DEFAULT_PREFIX", "CLD")
    id_random_length: int = int(os.getenv("ID_RANDOM_LENGTH", "6"))

    # Async processing
    async_processing_delay: float = float(os.getenv("ASYNC_PROCESSING_DELAY", "1.0"))
    async_max_workers: int = int(os.getenv("ASYNC_MAX_WORKERS", "4"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "info")
    log_json: bool = os.getenv("LOG_JSON", "false").lower() == "true"

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not self.cache_namespace or ":" in self.cache_namespace:
            raise ValueError("CACHE_NAMESPACE must be non-empty and must not contain ':'")

        if self.cache_default_ttl <= 0:
            raise ValueError(f"CACHE_DEFAULT_TTL must be positive, got {self.cache_default_ttl}")

        if self.id_random_length < 0:
            raise ValueError(f"ID_RANDOM_LENGTH must not be negative, got {self.id_random_length}")

        if self.async_processing_delay < 0:
            raise ValueError("ASYNC_PROCESSING_DELAY must not be negative")

        if self.async_max_workers < 1:
            raise ValueError(f"ASYNC_MAX_WORKERS must be at least 1, got {self.async_max_workers}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )
