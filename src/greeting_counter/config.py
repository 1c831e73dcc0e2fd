"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

IN_MEMORY_DATABASE = ":memory:"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    environment: str = _ENVIRONMENT
    database_path: str = "database.sqlite"
    cors_origin: str = "http://localhost:3000"
    app_title: str = "ロマ子あるある挨拶カウンター"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3001
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def uses_memory_store(self) -> bool:
        """Return True when the store should live only for this process."""
        return (
            self.environment == "test" or self.database_path == IN_MEMORY_DATABASE
        )

    def database_url(self) -> str:
        """Return the SQLAlchemy URL for the configured SQLite database."""
        if self.uses_memory_store():
            return f"sqlite+aiosqlite:///{IN_MEMORY_DATABASE}"
        return f"sqlite+aiosqlite:///{self.database_path}"
