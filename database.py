"""
Persistence gateway: owns the SQLAlchemy engine and its connection pool.

The engine is created once per process by init_engine() (called from the app's
startup hook or the operator CLI) and released with dispose_engine().
Request handlers borrow sessions through the get_db() dependency.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from core.config import Settings, get_settings

logger = logging.getLogger("database")

Base = declarative_base()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def engine_options(settings: Settings) -> Dict[str, Any]:
    """Keyword arguments for create_engine derived from settings."""
    kwargs: Dict[str, Any] = {"echo": settings.db_echo, "pool_pre_ping": True}
    if settings.is_sqlite:
        # Connections are shared with FastAPI's worker threads.
        kwargs["connect_args"] = {"check_same_thread": False}
        return kwargs
    kwargs.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
    )
    if settings.db_sslmode:
        kwargs["connect_args"] = {"sslmode": settings.db_sslmode}
    return kwargs


def build_engine(settings: Settings) -> Engine:
    return create_engine(settings.database_url, **engine_options(settings))


def init_engine(settings: Optional[Settings] = None) -> Engine:
    """Create the process-wide engine if it does not exist yet and return it."""
    global _engine, _session_factory
    if _engine is None:
        settings = settings or get_settings()
        _engine = build_engine(settings)
        _session_factory = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)
        logger.info("engine_initialized dialect=%s", _engine.dialect.name)
    return _engine


def get_engine() -> Engine:
    return init_engine()


def get_sessionmaker() -> sessionmaker:
    init_engine()
    if _session_factory is None:
        raise RuntimeError("Database engine is not initialized")
    return _session_factory


def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
        logger.info("engine_disposed")
    _engine = None
    _session_factory = None


def get_db() -> Iterator[Session]:
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()


def create_schema(engine: Engine) -> None:
    """Create the courses table if it is absent. Never destructive."""
    import models  # noqa: F401  registers the tables on Base.metadata

    Base.metadata.create_all(bind=engine)
    logger.info("schema_ready")


def drop_schema(engine: Engine) -> None:
    import models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    logger.warning("schema_dropped")


def check_connection(engine: Engine) -> Dict[str, Any]:
    """Run a trivial round-trip and report server time and version."""
    with engine.connect() as conn:
        if engine.dialect.name == "postgresql":
            row = conn.execute(text("SELECT NOW() AS now, version() AS version")).one()
            return {"time": row.now, "version": row.version}
        if engine.dialect.name == "sqlite":
            row = conn.execute(text("SELECT CURRENT_TIMESTAMP AS now, sqlite_version() AS version")).one()
            return {"time": row.now, "version": f"SQLite {row.version}"}
        conn.execute(text("SELECT 1"))
        return {"time": None, "version": engine.dialect.name}
