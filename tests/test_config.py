"""Tests for settings parsing and season derivation."""
from datetime import date

import pytest

from fpl_sync.core.config import DEFAULT_DATABASE_URL, Settings
from fpl_sync.core.season import current_season, season_for_date


class TestSettings:

    def test_league_ids_skip_garbage(self):
        settings = Settings(ENVIRONMENT="test", LEAGUE_IDS_STR="314, abc,,999 ")
        assert settings.LEAGUE_IDS == [314, 999]

    def test_no_league_ids(self):
        assert Settings(ENVIRONMENT="test", LEAGUE_IDS_STR="").LEAGUE_IDS == []

    def test_cors_defaults_outside_production(self):
        assert "http://localhost:3000" in Settings(ENVIRONMENT="development").CORS_ORIGINS

    def test_wildcard_cors_refused_in_production(self):
        settings = Settings(ENVIRONMENT="production", CORS_ORIGINS_STR="*")
        assert settings.CORS_ORIGINS == []

    def test_production_requires_storage_urls(self):
        settings = Settings(
            ENVIRONMENT="production",
            DATABASE_URL=DEFAULT_DATABASE_URL,
            REDIS_URL="redis://cache.internal:6379/0",
        )
        assert settings.validate_required_secrets() == ["DATABASE_URL"]

    def test_development_needs_nothing(self):
        assert Settings(ENVIRONMENT="development").validate_required_secrets() == []


class TestSeason:

    @pytest.mark.parametrize("day, expected", [
        (date(2025, 8, 1), "2526"),
        (date(2026, 5, 24), "2526"),
        (date(2026, 7, 31), "2526"),
        (date(2099, 12, 1), "9900"),
    ])
    def test_season_for_date(self, day, expected):
        assert season_for_date(day) == expected

    def test_configured_season_wins(self):
        assert current_season("2425", today=date(2026, 1, 1)) == "2425"
        assert current_season(None, today=date(2026, 1, 1)) == "2526"
