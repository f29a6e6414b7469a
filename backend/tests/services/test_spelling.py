"""Unit tests for the spelling analyzer."""

from content_checker.services.spelling import analyze_spelling, candidate_words


class WordListDictionary:
    """Minimal dictionary over a fixed word list."""

    def __init__(self, words: set[str], suggestions: dict[str, list[str]] | None = None) -> None:
        self.words = words
        self.suggestions = suggestions or {}

    def correct(self, word: str) -> bool:
        return word in self.words

    def suggest(self, word: str) -> list[str]:
        return self.suggestions.get(word, [])


BASIC = WordListDictionary(
    {"the", "quick", "brown", "fox", "don't", "café", "crème"},
    suggestions={"teh": ["the", "ten", "tea", "tech", "ted"]},
)


class TestCandidateWords:
    def test_skips_acronyms_and_single_letters(self) -> None:
        assert candidate_words("NASA SEO a I x quick") == ["quick"]

    def test_keeps_accents_and_inner_apostrophes(self) -> None:
        words = candidate_words("Café crème, don't 'quoted'")
        assert words == ["Café", "crème", "don't", "quoted"]

    def test_skips_urls(self) -> None:
        assert candidate_words("Visit https://example.com/pricing today") == [
            "Visit",
            "today",
        ]

    def test_sample_limit(self) -> None:
        assert candidate_words("quick brown zzz", sample_limit=2) == ["quick", "brown"]


class TestAnalyzeSpelling:
    def test_unavailable_without_dictionary(self) -> None:
        result = analyze_spelling("anything", None, lang="fr")

        assert result.score is None
        assert result.details["available"] is False
        assert result.details["lang"] == "fr"

    def test_flags_misspellings_with_frequency(self) -> None:
        result = analyze_spelling("Teh quick brown fox teh", BASIC)

        assert result.details["available"] is True
        assert result.details["checkedWords"] == 5
        assert result.details["misspelledOccurrences"] == 2
        assert result.details["misspelled"] == [
            {"word": "teh", "count": 2, "suggestions": ["the", "ten", "tea"]}
        ]
        assert result.score == 60

    def test_clean_text_scores_full_marks(self) -> None:
        result = analyze_spelling("Café crème, don't.", BASIC)

        assert result.score == 100
        assert result.details["misspelled"] == []

    def test_top_offenders_capped_at_ten(self) -> None:
        text = " ".join(f"zz{chr(97 + i)}" for i in range(12))
        result = analyze_spelling(text, BASIC)

        assert result.details["misspelledUnique"] == 12
        assert len(result.details["misspelled"]) == 10
        assert result.score == 0

    def test_offenders_ordered_by_frequency(self) -> None:
        result = analyze_spelling("zzb zza zzb zzc zzb zza", BASIC)
        assert [m["word"] for m in result.details["misspelled"]] == ["zzb", "zza", "zzc"]

    def test_empty_text(self) -> None:
        result = analyze_spelling("", BASIC)

        assert result.score == 100
        assert result.details["checkedWords"] == 0
