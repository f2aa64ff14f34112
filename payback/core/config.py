from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "payback"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DATABASE_DSN: str = "sqlite:////tmp/payback.db"
    REDIS_URL: str = "redis://localhost:6379"

    # Identity tokens are issued by the external auth service
    JWT_SECRET: str = "change-me-in-production-32-bytes-min"
    JWT_ALGORITHM: str = "HS256"

    # Payment processor
    PROCESSOR_PAGE_SIZE: int = 100  # Stripe list maximum
    PROCESSOR_MAX_CONCURRENCY: int = 20
    PROCESSOR_MAX_NETWORK_RETRIES: int = 0

    # Failed transaction window when no dates are given
    DEFAULT_LOOKBACK_DAYS: int = 7

    # Request idempotency
    IDEMPOTENCY_TTL_HOURS: int = 24

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Rate limiting
    RATE_LIMIT_RETRIES_PER_MINUTE: int = 30


settings = Settings()
