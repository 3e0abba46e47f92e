"""Configuration management for calldesk.

Uses pydantic-settings to load configuration from environment variables.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_env_file() -> Path | None:
    """Search for .env file in common locations."""
    cwd = Path.cwd()

    # Check cwd and parent directories (up to 5 levels) for project root .env
    check_dir = cwd
    for _ in range(5):
        if (check_dir / ".env").exists():
            return check_dir / ".env"
        parent = check_dir.parent
        if parent == check_dir:
            break
        check_dir = parent

    # backend/src/calldesk/config.py -> project root
    project_root = Path(__file__).resolve().parent.parent.parent.parent
    if (project_root / ".env").exists():
        return project_root / ".env"

    return None


_env_file = _find_env_file()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_env_file) if _env_file else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================
    # Environment
    # =========================
    environment: Literal["development", "staging", "production"] = "development"

    # =========================
    # API Settings
    # =========================
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # =========================
    # PostgreSQL
    # =========================
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "calldesk"
    postgres_user: str = "calldesk"
    postgres_password: str = Field(default="", repr=False)

    @computed_field(repr=False)
    @property
    def database_url(self) -> str:
        """SQLAlchemy database URL for PostgreSQL."""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field(repr=False)
    @property
    def database_url_sync(self) -> str:
        """Synchronous database URL for Alembic."""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # =========================
    # Client Resolution
    # =========================
    resolution_accept_threshold: float = Field(
        default=0.5,
        ge=0.0,
        description="Minimum combined similarity to accept a fuzzy candidate",
    )
    resolution_early_exit_threshold: float = Field(
        default=1.8,
        ge=0.0,
        description="Combined similarity at which the fuzzy scan stops",
    )
    resolution_max_candidates: int = Field(
        default=50_000,
        ge=1,
        description="Maximum candidates examined by a single fuzzy scan",
    )
    resolution_scan_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Wall-clock budget for a single fuzzy scan",
    )
    resolution_stream_batch_size: int = Field(default=100, ge=1)

    # =========================
    # Logging
    # =========================
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
