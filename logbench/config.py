"""
Configuration settings for the log index benchmark.

Uses Pydantic Settings to load environment variables for database connections,
logging, ingestion and benchmark defaults.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5435, alias="DB_PORT")
    db_user: str = Field("loguser", alias="DB_USER")
    db_password: str = Field("logpassword", alias="DB_PASSWORD")
    db_name: str = Field("logdb", alias="DB_NAME")
    database_url: Optional[str] = Field(None, alias="DATABASE_URL")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Ingestion
    ingest_batch_size: int = Field(1000, alias="INGEST_BATCH_SIZE")
    ingest_jitter_days: int = Field(30, alias="INGEST_JITTER_DAYS")

    # Query defaults
    default_page_limit: int = Field(50, alias="DEFAULT_PAGE_LIMIT")

    # Benchmark defaults
    benchmark_case_limit: int = Field(100, alias="BENCHMARK_CASE_LIMIT")
    benchmark_sample_size: int = Field(1000, alias="BENCHMARK_SAMPLE_SIZE")
    benchmark_results_dir: str = Field("results", alias="BENCHMARK_RESULTS_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
