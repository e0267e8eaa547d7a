"""Sync engine factory. SQLite connections get WAL, foreign keys and a busy timeout."""
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import Engine, create_engine, make_url

from credit_pipeline.db.config import DBConfig


def _sqlite_pragmas(cfg: DBConfig) -> list[str]:
    return [
        f"PRAGMA journal_mode={cfg.sqlite_journal_mode}",
        f"PRAGMA foreign_keys={'ON' if cfg.sqlite_foreign_keys else 'OFF'}",
        f"PRAGMA synchronous={cfg.sqlite_synchronous}",
        f"PRAGMA busy_timeout={cfg.sqlite_busy_timeout_ms}",
    ]


def _make_sqlite_parent(db_url: str) -> None:
    url = make_url(db_url)
    if url.database and url.database != ":memory:":
        Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def create_engine_from_config(cfg: DBConfig) -> Engine:
    """Engine for cfg.db_url. Worker threads share it, so SQLite skips the same-thread check."""
    if make_url(cfg.db_url).get_backend_name() != "sqlite":
        return create_engine(cfg.db_url, echo=cfg.echo_sql, pool_pre_ping=True)

    _make_sqlite_parent(cfg.db_url)
    # isolation_level=None: journal_mode cannot change inside a transaction.
    engine = create_engine(
        cfg.db_url,
        echo=cfg.echo_sql,
        connect_args={"isolation_level": None, "check_same_thread": False},
    )
    statements = _sqlite_pragmas(cfg)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _record) -> None:
        cursor = dbapi_conn.cursor()
        try:
            for stmt in statements:
                cursor.execute(stmt)
        finally:
            cursor.close()

    return engine
