"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - otc_ttl_seconds and jwt_expires_seconds are strictly positive

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Email delivery disabled by default: codes are logged instead (local development)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://proofpass:proofpass@db:5432/proofpass"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Session tokens
    jwt_secret_key: str = "change-me-placeholder-secret"
    jwt_algorithm: str = "HS256"
    jwt_expires_seconds: int = Field(86_400, gt=0)

    # One-time codes
    otc_ttl_seconds: int = Field(60, gt=0)
    enable_login_email: bool = False
    login_email_sender: str = "no-reply@proofpass.io"
    ses_region: str = "us-west-2"
    email_timeout_seconds: float = 10.0

    # Issuer
    issuer_url: str = "http://issuer.app.svc.cluster.local:9090"
    issuer_chain_id: int = 1
    issuer_timeout_seconds: float = 10.0
    email_credential_context_id: str = "111"

    # Context registry
    eth_rpc_url: str = "http://localhost:8545"
    context_registry_addr: str = "0x" + "0" * 40
    registry_sender_addr: str | None = None
    registry_timeout_seconds: float = 10.0

    # Stored on every event
    event_chain_id: str = "1"
    issuer_key_id: str = "0xc4525dA874A6A3877db65e37f21eEc0b41ef9877"

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
