"""Configuration management for NewsPulse."""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from .constants import CacheConstants, FileConstants, ScoringConstants, ValidationConstants


class Settings(BaseSettings):
    """Application settings."""

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    # Result cache
    cache_dir: str = Field(FileConstants.CACHE_DIR, description="Directory of the durable cache store")
    cache_ttl_hours: float = Field(CacheConstants.CACHE_TTL_HOURS, description="Result time-to-live in hours")
    cache_max_entries: int = Field(CacheConstants.MAX_CACHE_SIZE, description="Maximum cached results")
    cache_persist_key: str = Field(CacheConstants.PERSIST_KEY, description="Key of the persisted cache snapshot")
    cache_persist_max_age_days: float = Field(
        CacheConstants.PERSIST_MAX_AGE_DAYS, description="Discard persisted snapshots older than this"
    )

    # Validation
    validation_history_size: int = Field(
        ValidationConstants.HISTORY_SIZE, description="Validation runs kept in history"
    )

    # Lexicon and negation tuning
    lexicon_path: Optional[str] = Field(None, description="YAML file overriding the default lexicon")
    negation_factor: float = Field(ScoringConstants.NEGATION_FACTOR, description="Local negation damping")
    negation_shift: float = Field(ScoringConstants.NEGATION_SHIFT, description="Sentence negation shift")
    double_negation_damping: float = Field(
        ScoringConstants.DOUBLE_NEGATION_DAMPING, description="Loss applied on double negation"
    )

    # Persistence retries
    max_retries: int = Field(3, description="Maximum retry attempts")
    retry_delay: float = Field(0.5, description="Base retry delay in seconds")
    retry_backoff: float = Field(2.0, description="Retry backoff multiplier")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def setup_logging(level: Optional[str] = None):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format=FileConstants.LOG_FORMAT,
    )


# Global settings instance
settings = Settings()
