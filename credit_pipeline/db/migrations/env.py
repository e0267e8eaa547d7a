"""Alembic environment for the pipeline tables; runs sync, reusing a caller-provided connection."""
from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from sqlalchemy.engine import Connection
from alembic import context

# Import Base and all ORM models so autogenerate sees tables
from credit_pipeline.db.base import Base
import credit_pipeline.db.models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)
target_metadata = Base.metadata


def get_url() -> str:
    """Database URL from alembic config, else DB_URL / .env via DBConfig."""
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    from credit_pipeline.db.config import DBConfig
    return DBConfig().db_url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (generate SQL only)."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode; reuse a caller-provided connection when given."""
    connection = config.attributes.get("connection", None)
    if connection is not None:
        do_run_migrations(connection)
        return
    connectable = create_engine(get_url(), poolclass=pool.NullPool)
    with connectable.connect() as conn:
        do_run_migrations(conn)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
