"""Spell-check dictionaries, loaded lazily and cached per language.

A dictionary is anything with `correct(word) -> bool` and
`suggest(word) -> list[str]`. Sources are registered in DICTIONARY_SOURCES
and resolved once when the cache is created.

The cache maps a language to the asyncio.Task that loads it, so concurrent
first requests for a language await the same load instead of starting a
second one. Loads run in a worker thread. A failed load is evicted so a
later request can retry.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Protocol

from spellchecker import SpellChecker

from content_checker.core.logging import get_logger

logger = get_logger(__name__)

MAX_SUGGESTIONS = 3


class DictionaryUnavailableError(Exception):
    """Raised when a dictionary cannot be loaded for a language."""

    def __init__(self, lang: str, reason: str) -> None:
        super().__init__(f"No dictionary available for '{lang}': {reason}")
        self.lang = lang
        self.reason = reason


class Dictionary(Protocol):
    """Spell-check capability consumed by the spelling analyzer."""

    def correct(self, word: str) -> bool: ...

    def suggest(self, word: str) -> list[str]: ...


class PySpellCheckerDictionary:
    """Dictionary backed by pyspellchecker word-frequency lists."""

    def __init__(self, checker: SpellChecker) -> None:
        self._checker = checker

    @classmethod
    def load(cls, lang: str) -> "PySpellCheckerDictionary":
        """Load the word list for lang. Blocking; call from a worker thread."""
        try:
            checker = SpellChecker(language=lang)
        except ValueError as e:
            raise DictionaryUnavailableError(lang, str(e)) from e
        return cls(checker)

    def correct(self, word: str) -> bool:
        return bool(self._checker.known([word.lower()]))

    def suggest(self, word: str) -> list[str]:
        candidates = self._checker.candidates(word.lower()) or set()
        ranked = sorted(
            candidates,
            key=lambda c: (-self._checker.word_usage_frequency(c), c),
        )
        return ranked[:MAX_SUGGESTIONS]


DictionaryLoader = Callable[[str], Dictionary]

DICTIONARY_SOURCES: dict[str, DictionaryLoader] = {
    "pyspellchecker": PySpellCheckerDictionary.load,
}


def normalize_lang(lang: str | None, default: str = "en") -> str:
    """Reduce a language tag like 'en-US' or 'pt_BR' to its base code."""
    if not lang or not lang.strip():
        return default
    return lang.strip().lower().replace("_", "-").split("-")[0]


def get_dictionary_loader(source: str) -> DictionaryLoader:
    try:
        return DICTIONARY_SOURCES[source]
    except KeyError:
        raise ValueError(
            f"Unknown dictionary source '{source}'. "
            f"Available: {', '.join(sorted(DICTIONARY_SOURCES))}"
        ) from None


class DictionaryCache:
    """Keyed, single-flight cache of loaded dictionaries.

    Usage:
        cache = DictionaryCache(get_dictionary_loader("pyspellchecker"))
        dictionary = await cache.get("en")
    """

    def __init__(self, loader: DictionaryLoader, default_lang: str = "en") -> None:
        self._loader = loader
        self._default_lang = default_lang
        self._tasks: dict[str, asyncio.Task[Dictionary]] = {}

    @property
    def loaded_languages(self) -> list[str]:
        """Languages whose dictionary finished loading successfully."""
        return sorted(
            lang
            for lang, task in self._tasks.items()
            if task.done() and not task.cancelled() and task.exception() is None
        )

    async def _load(self, lang: str) -> Dictionary:
        start_time = time.monotonic()
        logger.info("Loading dictionary", extra={"lang": lang})
        dictionary = await asyncio.to_thread(self._loader, lang)
        duration_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "Dictionary loaded",
            extra={"lang": lang, "duration_ms": round(duration_ms, 2)},
        )
        if duration_ms > 1000:
            logger.warning(
                "Slow dictionary load",
                extra={"lang": lang, "duration_ms": round(duration_ms, 2)},
            )
        return dictionary

    async def get(self, lang: str | None = None) -> Dictionary:
        """Return the dictionary for lang, loading it on first use.

        Raises:
            DictionaryUnavailableError: If the dictionary cannot be loaded
        """
        key = normalize_lang(lang, self._default_lang)
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.create_task(self._load(key))
            self._tasks[key] = task

        try:
            # Shielded so a cancelled request does not abort a shared load
            return await asyncio.shield(task)
        except DictionaryUnavailableError:
            self._evict(key, task)
            raise
        except asyncio.CancelledError:
            if task.cancelled():
                self._evict(key, task)
            raise
        except Exception as e:
            self._evict(key, task)
            raise DictionaryUnavailableError(key, f"{type(e).__name__}: {e}") from e

    async def get_or_none(self, lang: str | None = None) -> Dictionary | None:
        """Like get(), but logs and returns None when no dictionary loads."""
        try:
            return await self.get(lang)
        except DictionaryUnavailableError as e:
            logger.warning(
                "Dictionary unavailable",
                extra={"lang": e.lang, "reason": e.reason},
            )
            return None

    def _evict(self, key: str, task: asyncio.Task[Dictionary]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
