"""Tests for environment-driven configuration helpers."""

from __future__ import annotations

import pytest

from diet_scraper import config


class TestEnvHelpers:
    def test_int_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DIET_PROFILE_CONCURRENCY", "4")
        assert config._env_int("DIET_PROFILE_CONCURRENCY", 2) == 4

    def test_bad_int_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DIET_PROFILE_CONCURRENCY", "many")
        assert config._env_int("DIET_PROFILE_CONCURRENCY", 2) == 2

    def test_bad_float_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DIET_CACHE_MAX_AGE_HOURS", "a day")
        assert config._env_float("DIET_CACHE_MAX_AGE_HOURS", 24.0) == 24.0

    def test_ms_to_s(self) -> None:
        assert config.ms_to_s(1500) == 1.5
        assert config.ms_to_s(-10) == 0


class TestRosterUrls:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("HOUSE_OF_REPRESENTATIVES_URLS", raising=False)
        urls = config.get_representatives_list_urls()
        assert len(urls) == 10
        assert urls[0].endswith("/syu/1giin.htm")
        assert urls[-1].endswith("/syu/10giin.htm")

    def test_env_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOUSE_OF_REPRESENTATIVES_URLS", "https://a.test/1.htm, ,https://a.test/2.htm")
        assert config.get_representatives_list_urls() == [
            "https://a.test/1.htm",
            "https://a.test/2.htm",
        ]
