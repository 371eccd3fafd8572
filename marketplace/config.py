"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./marketplace.db"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Caller identity (tokens are issued by the auth service)
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440  # 24 hours

    # Admission
    min_credibility_score: float = 50.0
    allow_self_purchase: bool = False

    # Credibility scoring
    ideal_response_minutes: float = 1440.0  # 24 hours
    transaction_weight: float = 30.0
    rating_weight: float = 30.0
    response_weight: float = 20.0
    reliability_weight: float = 20.0
    dispute_penalty: float = 100.0
    cancellation_penalty: float = 50.0

    # Lifecycle
    dispute_reason_min_length: int = 10
    rating_max_retries: int = 5
    notification_workers: int = 4

    # Reconciliation
    scheduler_enabled: bool = True
    reconcile_interval_minutes: int = 5

    model_config = {"env_prefix": "MKT_", "env_file": ".env"}


settings = Settings()
