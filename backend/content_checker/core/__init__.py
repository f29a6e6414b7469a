"""Core utilities and configuration."""

from content_checker.core.config import AnalysisConfig, Settings, get_settings
from content_checker.core.logging import (
    claude_logger,
    get_logger,
    link_check_logger,
    page_fetch_logger,
    setup_logging,
)

__all__ = [
    # Config
    "AnalysisConfig",
    "Settings",
    "get_settings",
    # Logging
    "claude_logger",
    "get_logger",
    "link_check_logger",
    "page_fetch_logger",
    "setup_logging",
]
