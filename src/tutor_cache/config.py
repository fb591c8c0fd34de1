import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

from tutor_cache.entities import CacheFamily

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Cache
    cache_backend: str = os.getenv("CACHE_BACKEND", "redis")  # "redis" or "memory"
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "tutor_cache")
    ttl_content_days: int = int(os.getenv("CACHE_TTL_CONTENT_DAYS", "30"))
    ttl_recommendation_days: int = int(os.getenv("CACHE_TTL_RECOMMENDATION_DAYS", "7"))
    ttl_grading_days: int = int(os.getenv("CACHE_TTL_GRADING_DAYS", "30"))
    ttl_chat_days: int = int(os.getenv("CACHE_TTL_CHAT_DAYS", "7"))

    # Cleanup job
    cache_cleanup_cron: str = os.getenv("CACHE_CLEANUP_CRON", "0 2 * * *")  # 2 AM UTC daily
    cache_cleanup_enabled: bool = os.getenv("CACHE_CLEANUP_ENABLED", "true").lower() == "true"

    # Generation service
    llm_provider: str = os.getenv("LLM_PROVIDER", "openai")  # "openai" or "ollama"
    llm_timeout: float = float(os.getenv("LLM_TIMEOUT", "60"))
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str | None = os.getenv("OPENAI_BASE_URL")
    simple_model: str = os.getenv("OPENAI_SIMPLE_MODEL", "gpt-3.5-turbo")
    advanced_model: str = os.getenv("OPENAI_ADVANCED_MODEL", "gpt-4o-mini")
    grading_model: str = os.getenv("OPENAI_GRADING_MODEL", "gpt-4o-mini")
    chatbot_model: str = os.getenv("OPENAI_CHATBOT_MODEL", "gpt-3.5-turbo")
    temperature: float = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
    max_tokens: int = int(os.getenv("OPENAI_MAX_TOKENS", "2000"))
    chatbot_temperature: float = float(os.getenv("OPENAI_CHATBOT_TEMPERATURE", "0.7"))
    chatbot_max_tokens: int = int(os.getenv("OPENAI_CHATBOT_MAX_TOKENS", "500"))

    # Ollama
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def ttl_days(self, family: CacheFamily) -> int:
        """Return the cache TTL in days for a content family.

        Args:
            family: The cache family

        Returns:
            Number of days an entry of this family stays live
        """
        return {
            CacheFamily.CONTENT: self.ttl_content_days,
            CacheFamily.RECOMMENDATION: self.ttl_recommendation_days,
            CacheFamily.GRADING: self.ttl_grading_days,
            CacheFamily.CHAT: self.ttl_chat_days,
        }[family]

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_backend not in ("redis", "memory"):
            raise ValueError(f"CACHE_BACKEND must be 'redis' or 'memory', got {self.cache_backend!r}")

        if self.llm_provider not in ("openai", "ollama"):
            raise ValueError(f"LLM_PROVIDER must be 'openai' or 'ollama', got {self.llm_provider!r}")

        for name in ("ttl_content_days", "ttl_recommendation_days", "ttl_grading_days", "ttl_chat_days"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be a positive number of days")

        if not 0 <= self.temperature <= 2:
            raise ValueError("OPENAI_TEMPERATURE must be between 0 and 2")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client(app_settings: Settings | None = None) -> redis.Redis:
    """Create a Redis client instance."""
    app_settings = app_settings or settings
    return redis.from_url(
        app_settings.redis_url,
        password=app_settings.redis_password,
        decode_responses=True,
    )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the API and the CLI."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
