"""Programmatic Alembic upgrade, used by the CLI init-db command."""
from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from credit_pipeline.db.config import DBConfig
from credit_pipeline.db.engine import create_engine_from_config

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def alembic_config(db_url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def upgrade_to_head(db_cfg: DBConfig | None = None) -> None:
    """Apply all migrations on the configured database (PRAGMAs applied on the connection)."""
    db_cfg = db_cfg or DBConfig()
    engine = create_engine_from_config(db_cfg)
    cfg = alembic_config(db_cfg.db_url)
    try:
        with engine.begin() as connection:
            cfg.attributes["connection"] = connection
            command.upgrade(cfg, "head")
    finally:
        engine.dispose()
    logger.info("database migrated to head", extra={"db_url": db_cfg.db_url})
