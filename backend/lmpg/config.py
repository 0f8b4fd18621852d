"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_VERSION = "1.2.0"
DEFAULT_MIGRATIONS_DIR = str(Path(__file__).parent / "sql_migrations")


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://lmpg:lmpg@db:5432/church_attendance"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if isinstance(v, str) and v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"

    # API
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Imports
    upload_max_bytes: int = 5 * 1024 * 1024

    # Church defaults
    default_timezone: str = "America/New_York"
    default_email_from_name: str = "Let My People Grow"
    default_email_from_address: str = "noreply@letmypeoplegrow.com.au"

    # Operator-run SQL migrations
    migrations_dir: str = DEFAULT_MIGRATIONS_DIR

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
