"""DB module: config, engine, session, models, repositories."""
from credit_pipeline.db.config import DBConfig
from credit_pipeline.db.session import create_all, init_db, session_scope

__all__ = ["DBConfig", "init_db", "create_all", "session_scope"]
