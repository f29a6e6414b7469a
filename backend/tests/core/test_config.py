"""Tests for application settings and the derived analyzer configuration."""

import pytest

from content_checker.core.config import AnalysisConfig, Settings


class TestAnalysisConfig:
    def test_defaults(self) -> None:
        config = AnalysisConfig()

        assert config.broken_link_mode == "fast"
        assert config.broken_link_fast_max_urls == 5
        assert config.duplicate_overlap_weight == 0.3
        assert config.cqi_sample_limit == 5000

    def test_weights_must_sum_to_one(self) -> None:
        with pytest.raises(ValueError, match="CQI weights must sum to 1.0"):
            AnalysisConfig(vocab_weight=0.5, read_weight=0.5, length_weight=0.5)

    def test_overlap_weight_range(self) -> None:
        with pytest.raises(ValueError, match="duplicate_overlap_weight"):
            AnalysisConfig(duplicate_overlap_weight=1.5)


class TestSettings:
    def test_mode_is_case_insensitive(self) -> None:
        settings = Settings(broken_link_mode="  SYNC ")
        assert settings.broken_link_mode == "sync"

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BROKEN_LINK_MODE", "off")
        monkeypatch.setenv("DUPLICATE_OVERLAP_WEIGHT", "0.5")

        settings = Settings()

        assert settings.broken_link_mode == "off"
        assert settings.duplicate_overlap_weight == 0.5

    def test_analysis_config_carries_tuning(self) -> None:
        settings = Settings(
            broken_link_mode="off",
            broken_link_sync_max_urls=12,
            duplicate_overlap_weight=0.1,
            default_lang="de",
        )

        config = settings.analysis_config()

        assert config.broken_link_mode == "off"
        assert config.broken_link_sync_max_urls == 12
        assert config.duplicate_overlap_weight == 0.1
        assert config.default_lang == "de"
