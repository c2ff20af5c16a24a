from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Application
    app_name: str = "Shortlink"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    shutdown_timeout_seconds: float = 10.0

    # Database
    database_url: str = "sqlite+aiosqlite:///./shortlink.db"

    # Shortener specific
    base_url: str = "http://127.0.0.1:8000"
    code_length: int = 6
    max_retries: int = 5
    max_url_length: int = 2048

    # Cache settings
    cache_backend: str = "redis"  # Options: "redis", "memory", "null"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 3600  # Cache TTL in seconds (1 hour)
    stats_cache_ttl: int = 300

    # Click tracking
    click_queue_size: int = 10000  # Events beyond this are dropped
    click_batch_size: int = 100

    # Rate limiting (token bucket per client IP)
    redirect_rate_per_second: float = 50.0
    redirect_burst: int = 100
    shorten_rate_per_second: float = 0.5
    shorten_burst: int = 5
    rate_limit_sweep_interval_seconds: float = 60.0

    # Age-based cleanup (0 disables)
    cleanup_max_age_days: int = 0
    cleanup_interval_seconds: float = 3600.0

    # Admin credentials (HTTP Basic)
    admin_username: str = "admin"
    admin_password: str = "change-me"

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
