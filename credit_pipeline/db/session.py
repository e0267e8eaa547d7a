"""Session factory and context manager. Async callers wrap repository work in asyncio.to_thread."""
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from credit_pipeline.db.config import DBConfig
from credit_pipeline.db.engine import create_engine_from_config

# Set by init_db()
_sync_engine: Engine | None = None
SessionLocal: sessionmaker | None = None


def init_db(cfg: DBConfig | None = None) -> Engine:
    """Initialize engine and session factory. Call once at startup (tests: once per temp DB)."""
    global _sync_engine, SessionLocal
    cfg = cfg or DBConfig()
    if _sync_engine is not None:
        _sync_engine.dispose()
    _sync_engine = create_engine_from_config(cfg)
    SessionLocal = sessionmaker(
        bind=_sync_engine,
        autoflush=True,
        expire_on_commit=False,
        autobegin=True,
    )
    return _sync_engine


def get_sync_engine() -> Engine:
    if _sync_engine is None:
        init_db()
    return _sync_engine


def create_all() -> None:
    """Create every table on the current engine (tests and first-run dev setups)."""
    from credit_pipeline.db.base import Base
    import credit_pipeline.db.models  # noqa: F401

    Base.metadata.create_all(get_sync_engine())


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Session context: commit on success, rollback + re-raise on exception."""
    if SessionLocal is None:
        init_db()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
