"""DB configuration (pydantic-settings). Env prefix: DB_."""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DBConfig(BaseSettings):
    """Database configuration. Load from env with prefix DB_ or from .env."""

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    db_url: str = Field(
        default="sqlite:///./data/credit_pipeline.db",
        validation_alias=AliasChoices("db_url", "DB_URL"),
        description="Database URL (env DB_URL)",
    )
    echo_sql: bool = Field(default=False, description="Echo SQL statements")
    sqlite_busy_timeout_ms: int = Field(default=5000, description="SQLite busy timeout in ms")
    sqlite_journal_mode: str = Field(default="WAL", description="SQLite journal_mode PRAGMA")
    sqlite_synchronous: str = Field(default="NORMAL", description="SQLite synchronous PRAGMA")
    sqlite_foreign_keys: bool = Field(default=True, description="SQLite foreign_keys PRAGMA")
