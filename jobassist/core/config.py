"""
Configuration management for JobAssist.

Loads settings from environment variables with sensible defaults.
Uses pydantic-settings for validation.
"""

import logging
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class CacheSettings(BaseSettings):
    """Redis cache settings. Leaving redis_url unset disables caching."""

    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL (rediss:// for hosted TLS Redis such as Upstash)"
    )
    default_ttl_seconds: int = Field(
        default=14400,
        description="Default time-to-live for cached entries (4 hours)"
    )
    key_prefix: str = Field(
        default="job-cache",
        description="Key prefix for job search cache entries"
    )
    scan_batch_size: int = Field(
        default=100,
        description="COUNT hint for SCAN during pattern invalidation"
    )
    socket_timeout: float = Field(
        default=5.0,
        description="Seconds before a Redis read/write is abandoned"
    )

    class Config:
        env_prefix = "CACHE_"


class LLMSettings(BaseSettings):
    """LLM API settings - Claude (Anthropic) for job extraction."""

    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key for Claude"
    )
    extraction_model: str = Field(
        default="claude-3-5-haiku-latest",
        description="Model used for structured job extraction (fast and cheap is fine)"
    )
    temperature: float = Field(
        default=0.0,
        description="LLM temperature for deterministic outputs"
    )
    max_tokens: int = Field(
        default=4096,
        description="Maximum tokens in LLM response"
    )
    use_mock: bool = Field(
        default=False,
        description="Use the mock client (no API calls)"
    )

    class Config:
        env_prefix = "LLM_"


class ScraperSettings(BaseSettings):
    """Scraper and extractor configuration."""

    request_timeout: float = Field(
        default=15.0,
        description="Seconds before an upstream HTTP request is abandoned"
    )
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="User-Agent sent when fetching arbitrary job pages"
    )

    # Thresholds
    min_page_text_length: int = Field(
        default=200,
        description="Stripped page text shorter than this is treated as blocked/invalid"
    )
    min_text_length: int = Field(
        default=50,
        description="Minimum text length accepted for extraction"
    )
    llm_char_budget: int = Field(
        default=15000,
        description="Characters of text sent to the LLM"
    )
    fallback_description_chars: int = Field(
        default=5000,
        description="Characters kept as description by the regex fallback"
    )

    class Config:
        env_prefix = "SCRAPER_"


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    # Application
    app_name: str = "JobAssist"
    debug: bool = Field(default=False)
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Sub-settings
    cache: CacheSettings = Field(default_factory=CacheSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    scraper: ScraperSettings = Field(default_factory=ScraperSettings)

    class Config:
        env_prefix = "JOBASSIST_"


def get_settings() -> Settings:
    """Get application settings. Useful for dependency injection."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )
