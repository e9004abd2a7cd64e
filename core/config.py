"""
Core configuration module for environment variables and settings management.

Design choices:
- Uses python-dotenv to load environment variables from a .env file when present.
- Avoids pydantic BaseSettings to keep dependencies minimal; Settings is a plain pydantic model.
- Provides a single get_settings() accessor with LRU caching to avoid repeated parsing.
"""
from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


DEFAULT_CORS_ORIGINS = "http://localhost:19006,exp://"


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def normalize_database_url(url: str) -> str:
    """Map Heroku/Render style ``postgres://`` URLs onto the psycopg driver."""
    if url.startswith("postgres://"):
        return "postgresql+psycopg://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


class Settings(BaseModel):
    environment: str = "dev"

    # Database
    database_url: str = "sqlite:///./courses.db"
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=5, ge=0)
    db_pool_timeout: int = Field(default=30, ge=1)
    db_echo: bool = False
    # Passed to psycopg as sslmode (e.g. "require" for managed Postgres); unset leaves the driver default
    db_sslmode: Optional[str] = None

    # HTTP surface
    api_prefix: str = ""
    cors_origins: List[str] = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.split(","))

    # Observability
    log_level: str = "INFO"

    # When true, 500 responses carry the driver error text. Opt-in only; never enable in production.
    expose_error_details: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load environment variables (from .env if present) and build a Settings object.

    This function is cached so app startup and repeated imports are efficient.
    """
    load_dotenv()  # no-op if .env not present
    origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        database_url=normalize_database_url(os.getenv("DATABASE_URL", "sqlite:///./courses.db")),
        db_pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
        db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "5")),
        db_pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
        db_echo=_as_bool(os.getenv("DB_ECHO", "false")),
        db_sslmode=os.getenv("DB_SSLMODE") or None,
        api_prefix=os.getenv("API_PREFIX", ""),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        expose_error_details=_as_bool(os.getenv("EXPOSE_ERROR_DETAILS", "false")),
    )
