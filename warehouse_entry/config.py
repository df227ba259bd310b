"""
Configuration settings for the warehouse entry widget.

Uses Pydantic Settings to load environment variables for the chooser query,
provenance lookups, logging, and the optional PostgreSQL record store.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="JSON_LOGS")

    # Chooser
    record_type: str = Field("warehouse", alias="WAREHOUSE_RECORD_TYPE")
    query_limit: int = Field(200, alias="WAREHOUSE_QUERY_LIMIT")
    sequence_queries: bool = Field(False, alias="WAREHOUSE_SEQUENCE_QUERIES")
    query_timeout_seconds: float = Field(10.0, alias="WAREHOUSE_QUERY_TIMEOUT")
    query_attempts: int = Field(3, alias="WAREHOUSE_QUERY_ATTEMPTS")

    # Provenance
    token_storage_key: str = Field("qnotes_token", alias="WAREHOUSE_TOKEN_KEY")

    # Record store
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("qnotes", alias="DB_NAME")
    blocks_table: str = Field("note_blocks", alias="WAREHOUSE_BLOCKS_TABLE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def dsn(self) -> str:
        """Compose a DSN string for the record store."""
        return (
            f"postgresql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
