"""Integrations layer - External service clients.

Integrations handle communication with external systems (the headless
browser and the Anthropic API). They abstract the details of those
protocols from the services layer.
"""

from content_checker.integrations.browser import (
    LOCATOR_TYPES,
    PageFetcher,
    PageFetchError,
    PlaywrightPageFetcher,
    build_locator_selector,
)
from content_checker.integrations.claude import (
    ClaudeClient,
    ClaudeError,
    ClaudeTimeoutError,
    CompletionResult,
    DriftAssessment,
)

__all__ = [
    # Browser
    "LOCATOR_TYPES",
    "PageFetcher",
    "PageFetchError",
    "PlaywrightPageFetcher",
    "build_locator_selector",
    # Claude
    "ClaudeClient",
    "ClaudeError",
    "ClaudeTimeoutError",
    "CompletionResult",
    "DriftAssessment",
]
