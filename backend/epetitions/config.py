"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Site defaults (title, url, thresholds...) are only read on a cold start,
      when no `sites` row exists yet; afterwards the row is authoritative

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Env names match the deployment variables (EPETITIONS_HOST, SITE_ENABLED, ...)
      so existing environments keep working
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://epetitions:epetitions@db:5432/epetitions"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    environment: str = "production"

    # Site defaults (cold start only)
    site_title: str = "Petition parliament"
    epetitions_protocol: str = "https"
    epetitions_host: str = "petition.parliament.uk"
    epetitions_port: int = 443
    epetitions_from: str | None = None
    epetitions_feedback: str | None = None
    site_username: str | None = None
    site_password: str | None = None
    site_enabled: int = 1
    site_protected: int = 0
    petition_duration: int = 6
    minimum_number_of_sponsors: int = 5
    maximum_number_of_sponsors: int = 20
    threshold_for_moderation: int = 5
    threshold_for_response: int = 10_000
    threshold_for_debate: int = 100_000

    @field_validator(
        "site_username", "site_password", "epetitions_from",
        "epetitions_feedback", mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # Site singleton cache
    site_cache_ttl_seconds: int = 300

    # Mail
    mail_delivery_method: str = "log"
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = False

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
