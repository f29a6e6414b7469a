"""Pytest configuration and fixtures.

Provides fixtures for:
- Settings override for testing
- Fake page fetcher and spelling dictionary
- A comparison service wired with fakes (no browser, no network)
- FastAPI test clients with the comparison service overridden
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from content_checker.core.config import AnalysisConfig, Settings, get_settings
from content_checker.integrations.browser import PageFetchError
from content_checker.services.comparison import (
    ComparisonService,
    get_comparison_service,
)
from content_checker.services.dictionaries import (
    DictionaryCache,
    DictionaryUnavailableError,
)
from content_checker.services.link_checker import BrokenLinkChecker
from content_checker.services.semantic_drift import (
    LexicalDriftProvider,
    SemanticDriftService,
)

# ---------------------------------------------------------------------------
# Settings Fixtures
# ---------------------------------------------------------------------------


def get_test_settings() -> Settings:
    """Get test settings: no network link checks, no Claude."""
    return Settings(
        app_name="Test App",
        app_version="0.0.1",
        debug=True,
        environment="test",
        log_level="DEBUG",
        log_format="text",
        broken_link_mode="off",
        anthropic_api_key=None,
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Session-scoped test settings."""
    return get_test_settings()


@pytest.fixture
def analysis_config() -> AnalysisConfig:
    """Analyzer configuration with link checking disabled."""
    return AnalysisConfig(broken_link_mode="off")


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

ENGLISH_WORDS = frozenset(
    """
    a about all an and are as at be best brown by can copy dog every for fox
    from get go great hello help here in is it jumps lazy learn more of on our
    over page quick site team the there this to today us we web website with
    world you your
    """.split()
)


class FakeDictionary:
    """In-memory dictionary with a fixed word list."""

    def __init__(
        self,
        words: frozenset[str] = ENGLISH_WORDS,
        suggestions: dict[str, list[str]] | None = None,
    ) -> None:
        self.words = words
        self.suggestions = suggestions or {}

    def correct(self, word: str) -> bool:
        return word.lower() in self.words

    def suggest(self, word: str) -> list[str]:
        return self.suggestions.get(word.lower(), [])


class FakePageFetcher:
    """Page fetcher returning canned text (or raising) and recording calls."""

    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    async def fetch_page_text(self, url: str, locator: str, locator_type: str) -> str:
        self.calls.append((url, locator, locator_type))
        if self.error is not None:
            raise self.error
        return self.text


def fake_dictionary_loader(lang: str) -> FakeDictionary:
    if lang != "en":
        raise DictionaryUnavailableError(lang, "not installed")
    return FakeDictionary(suggestions={"teh": ["the", "ten", "tea"]})


@pytest.fixture
def page_fetcher() -> FakePageFetcher:
    return FakePageFetcher(text="The quick brown fox jumps over the lazy dog.")


@pytest.fixture
def failing_page_fetcher() -> FakePageFetcher:
    return FakePageFetcher(
        error=PageFetchError(
            "Timeout 30000ms exceeded waiting for locator('#missing')",
            url="https://example.com",
            locator="missing",
        )
    )


@pytest.fixture
def dictionary_cache() -> DictionaryCache:
    return DictionaryCache(fake_dictionary_loader)


@pytest.fixture
def comparison_service(
    analysis_config: AnalysisConfig,
    page_fetcher: FakePageFetcher,
    dictionary_cache: DictionaryCache,
) -> ComparisonService:
    """Comparison service wired with fakes."""
    return ComparisonService(
        config=analysis_config,
        page_fetcher=page_fetcher,
        dictionaries=dictionary_cache,
        link_checker=BrokenLinkChecker(analysis_config),
        drift_service=SemanticDriftService([LexicalDriftProvider()]),
    )


# ---------------------------------------------------------------------------
# FastAPI Test Client Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def readability_preparations(monkeypatch: pytest.MonkeyPatch) -> list[bool]:
    """Replace startup corpus preparation; records the download flag per call."""
    from content_checker import main

    calls: list[bool] = []

    def fake_prepare(download: bool = True) -> bool:
        calls.append(download)
        return False

    monkeypatch.setattr(main, "prepare_readability_corpus", fake_prepare)
    return calls


@pytest.fixture
def app(comparison_service: ComparisonService, readability_preparations: list[bool]):
    """Create FastAPI app for testing with the comparison service overridden."""
    from content_checker.main import create_app

    application = create_app()
    application.dependency_overrides[get_settings] = get_test_settings
    application.dependency_overrides[get_comparison_service] = (
        lambda: comparison_service
    )
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create synchronous test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for testing async endpoints."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
