"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - rate_limit_timezone always names a zone the interpreter can load

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - No mail API key means notifications are skipped, not failed (ADR: mail is best-effort)
"""

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tripintake.core.domain_types import DAILY_SUBMISSION_CEILING


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://tripintake:tripintake@db:5432/tripintake"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    store_timeout_seconds: float = 5.0

    # Admission
    rate_limit_daily_ceiling: int = DAILY_SUBMISSION_CEILING
    rate_limit_timezone: str = "UTC"
    admission_serialize_per_identity: bool = False

    @field_validator("rate_limit_timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone {v!r}") from e
        return v

    # Identity
    jwt_secret: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    jwt_admin_claim: str = "admin"

    # Notifications (SendGrid v3)
    sendgrid_api_key: str | None = None
    sendgrid_base_url: str = "https://api.sendgrid.com"
    mail_from: str = "noreply@wandermint.io"
    mail_staff_recipient: str = "trips@wandermint.io"
    mail_timeout_seconds: float = 10.0
    mail_max_retries: int = 3
    mail_base_delay_ms: int = 500
    mail_max_delay_ms: int = 10_000

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def reference_timezone(self) -> ZoneInfo:
        return ZoneInfo(self.rate_limit_timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()
