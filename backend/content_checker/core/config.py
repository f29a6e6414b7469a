"""Application configuration loaded from environment variables.

All configuration is via environment variables (or a local .env file).
Analyzer tuning is converted once into an explicit AnalysisConfig that is
handed to the comparison service at construction time.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BrokenLinkMode = Literal["off", "fast", "sync"]


@dataclass(frozen=True)
class AnalysisConfig:
    """Tuning knobs for the scoring pipeline.

    Defaults match the documented CQI and analyzer behavior.
    """

    # CQI
    cqi_sample_limit: int = 5000
    cqi_length_scale: float = 200.0
    vocab_weight: float = 0.4
    read_weight: float = 0.3
    length_weight: float = 0.3
    reliable_min_words: int = 30

    # Broken links
    broken_link_mode: BrokenLinkMode = "fast"
    broken_link_fast_max_urls: int = 5
    broken_link_fast_timeout: float = 3.0
    broken_link_sync_max_urls: int = 50
    broken_link_sync_timeout: float = 8.0
    broken_link_concurrency: int = 10

    # Duplication
    duplicate_overlap_weight: float = 0.3

    # Spelling
    default_lang: str = "en"
    spelling_sample_limit: int = 5000

    def __post_init__(self) -> None:
        total = self.vocab_weight + self.read_weight + self.length_weight
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"CQI weights must sum to 1.0, got {total}")
        if not 0.0 <= self.duplicate_overlap_weight <= 1.0:
            raise ValueError("duplicate_overlap_weight must be within [0, 1]")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Content Checker")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    port: int = Field(default=3000, description="Port to bind to")
    host: str = Field(default="0.0.0.0", description="Host to bind to")
    frontend_url: str | None = Field(
        default=None, description="Allowed CORS origin (all origins when unset)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format: json or text")

    # Content Quality Index
    cqi_sample_limit: int = Field(
        default=5000, ge=1, description="Max words used for vocabulary/readability"
    )
    cqi_length_scale: float = Field(
        default=200.0, gt=0, description="Word count scale of the length curve"
    )

    # Broken link checking
    broken_link_mode: BrokenLinkMode = Field(
        default="fast", description="off, fast (capped) or sync (all URLs)"
    )
    broken_link_fast_max_urls: int = Field(default=5, ge=0)
    broken_link_fast_timeout: float = Field(
        default=3.0, gt=0, description="Per-URL timeout in fast mode (seconds)"
    )
    broken_link_sync_max_urls: int = Field(default=50, ge=0)
    broken_link_sync_timeout: float = Field(
        default=8.0, gt=0, description="Per-URL timeout in sync mode (seconds)"
    )
    broken_link_concurrency: int = Field(default=10, ge=1)

    # Duplicate content
    duplicate_overlap_weight: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Weight of live-page overlap in the duplication score",
    )

    # Spelling
    default_lang: str = Field(default="en", description="Default dictionary language")
    dictionary_source: str = Field(
        default="pyspellchecker", description="Registered spell-check dictionary source"
    )

    # Readability corpus (CMU pronouncing dictionary for textstat)
    readability_corpus_download: bool = Field(
        default=True, description="Download the readability corpus at startup when missing"
    )
    readability_corpus_timeout: float = Field(
        default=15.0, description="Seconds to wait for readability corpus preparation"
    )

    # Browser page fetch (Playwright)
    browser_timeout_ms: float = Field(
        default=30000.0, description="Navigation and locator timeout in milliseconds"
    )

    # Claude/Anthropic (optional semantic drift provider)
    anthropic_api_key: str | None = Field(
        default=None,
        description="Anthropic API key; enables the Claude drift provider",
    )
    claude_model: str = Field(default="claude-3-haiku-20240307")
    claude_timeout: float = Field(
        default=20.0, description="Claude API request timeout in seconds"
    )
    claude_max_retries: int = Field(
        default=2, description="Maximum retry attempts for Claude API requests"
    )
    claude_retry_delay: float = Field(
        default=1.0, description="Base delay between retries in seconds"
    )
    claude_max_tokens: int = Field(
        default=300, description="Maximum tokens in Claude response"
    )

    @field_validator("broken_link_mode", mode="before")
    @classmethod
    def _lowercase_mode(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value

    def analysis_config(self) -> AnalysisConfig:
        """Build the explicit analyzer configuration from settings."""
        return AnalysisConfig(
            cqi_sample_limit=self.cqi_sample_limit,
            cqi_length_scale=self.cqi_length_scale,
            broken_link_mode=self.broken_link_mode,
            broken_link_fast_max_urls=self.broken_link_fast_max_urls,
            broken_link_fast_timeout=self.broken_link_fast_timeout,
            broken_link_sync_max_urls=self.broken_link_sync_max_urls,
            broken_link_sync_timeout=self.broken_link_sync_timeout,
            broken_link_concurrency=self.broken_link_concurrency,
            duplicate_overlap_weight=self.duplicate_overlap_weight,
            default_lang=self.default_lang,
            spelling_sample_limit=self.cqi_sample_limit,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
