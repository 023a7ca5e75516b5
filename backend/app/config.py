"""
Application settings loaded from the environment.

All values come from process environment variables, optionally seeded from a
``.env`` file in the working directory. The PostgreSQL connection parameters
are required; importing this module without them raises
``pydantic.ValidationError`` so a misconfigured process fails at startup
instead of on its first request.
"""

from __future__ import annotations

from urllib.parse import quote

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _normalize_dsn(dsn: str) -> str:
    """
    Normalize a PostgreSQL DSN to the ``postgresql://`` scheme asyncpg accepts.

    Strips SQLAlchemy-style driver specifications (``postgresql+psycopg://``)
    and rewrites the legacy ``postgres://`` scheme.
    """
    if dsn.startswith(("postgresql+", "postgres+")):
        dsn = "postgresql://" + dsn.split("://", 1)[1]

    if dsn.startswith("postgres://"):
        dsn = "postgresql://" + dsn.split("://", 1)[1]

    return dsn


class Settings(BaseSettings):
    """Runtime configuration for the songs API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database connection
    DB_HOST: str
    DB_PORT: int = 5432
    DB_USER: str
    DB_PASSWORD: str
    DB_NAME: str
    DB_SSLMODE: str = "disable"
    DATABASE_URL: str = ""

    # Pool and timeouts
    DB_POOL_MIN_SIZE: int = Field(1, ge=0)
    DB_POOL_MAX_SIZE: int = Field(10, ge=1)
    DB_COMMAND_TIMEOUT: float = 30.0
    DB_STATEMENT_TIMEOUT_MS: int = Field(5000, ge=0)

    # HTTP
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    API_PREFIX: str = ""
    CORS_ORIGINS: str = "*"

    # Runtime
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    SERVICE_NAME: str = "songs-api"

    # Pagination
    PAGE_DEFAULT_LIMIT: int = Field(10, ge=1)

    # Metrics
    METRICS_ENABLED: bool = True
    METRICS_NAMESPACE: str = "songs_api"

    @property
    def dsn(self) -> str:
        """Return the asyncpg DSN, preferring ``DATABASE_URL`` when set."""
        if self.DATABASE_URL.strip():
            return _normalize_dsn(self.DATABASE_URL.strip())

        user = quote(self.DB_USER, safe="")
        password = quote(self.DB_PASSWORD, safe="")
        return (
            f"postgresql://{user}:{password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            f"?sslmode={self.DB_SSLMODE}"
        )

    def get_cors_origins_list(self) -> list[str]:
        """Split ``CORS_ORIGINS`` into a list, dropping blanks."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
