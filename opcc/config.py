from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "opcc"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/opcc"

    # Connection pool: bounded size, bounded wait before failing
    db_pool_size: int = 20
    db_max_overflow: int = 0
    db_pool_timeout: float = 2.0
    db_pool_recycle: int = 1800
    # Server-side statement timeout (PostgreSQL only, 0 disables)
    db_statement_timeout_ms: int = 0

    # Signed session cookie
    session_secret: str = "change-me-to-a-long-random-secret-value"
    session_max_age: int = 7 * 24 * 60 * 60

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Search tuning
    similarity_threshold: float = 0.15
    search_result_limit: int = 50
    keyword_max_length: int = 500
    slow_query_ms: int = 1000


settings = Settings()


# =============================================================================
# COLLECTION & SEARCH HARD LIMITS
# =============================================================================

# Copies of one card a user may hold, per owned/proxy kind
MAX_CARD_COPIES = 99

# Search never returns more rows than this, whatever the settings say
MAX_SEARCH_RESULTS = 50
