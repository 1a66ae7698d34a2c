"""Unit tests for platform-aware configuration defaults."""

from __future__ import annotations

import platformdirs
import pytest
from pydantic import ValidationError

from catalogsync.config import _DEFAULT_DATA_DIR, _DEFAULT_DB_PATH, CacheSettings, Settings


class TestPlatformDefaults:
    """Verify config defaults use platformdirs instead of hardcoded Unix paths."""

    def test_default_data_dir_matches_platformdirs(self) -> None:
        expected = platformdirs.user_data_dir("catalogsync")
        assert expected == _DEFAULT_DATA_DIR

    def test_default_db_path_under_data_dir(self) -> None:
        assert _DEFAULT_DB_PATH.startswith(_DEFAULT_DATA_DIR)
        assert _DEFAULT_DB_PATH.endswith("cache.db")

    def test_cache_settings_uses_platform_default(self) -> None:
        settings = CacheSettings()
        assert settings.db_path == _DEFAULT_DB_PATH


class TestDefaults:
    def test_cache_ttl_is_one_hour(self) -> None:
        assert Settings().cache.ttl_seconds == 3600

    def test_pagination_and_search_defaults(self) -> None:
        settings = Settings()
        assert settings.pagination.page_size == 20
        assert settings.pagination.prefetch_threshold == 3
        assert settings.search.debounce_ms == 300
        assert settings.search.cancel_superseded is True


class TestEnvironmentOverrides:
    def test_nested_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CATALOGSYNC__CACHE__TTL_SECONDS", "600")
        monkeypatch.setenv("CATALOGSYNC__SEARCH__DEBOUNCE_MS", "150")
        settings = Settings()
        assert settings.cache.ttl_seconds == 600
        assert settings.search.debounce_ms == 150

    def test_constructor_beats_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CATALOGSYNC__CACHE__MAX_ENTRIES", "10")
        settings = Settings(cache={"max_entries": 99})
        assert settings.cache.max_entries == 99


class TestConfigValidation:
    def test_wrong_type_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            Settings(cache={"ttl_seconds": "an hour"})  # type: ignore[arg-type]

    def test_negative_ttl_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CacheSettings(ttl_seconds=-1)

    def test_page_size_above_api_limit_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(pagination={"page_size": 41})  # type: ignore[arg-type]

    def test_unknown_top_level_field_raises_validation_error(self) -> None:
        """A YAML typo at the top level (e.g. 'cach:' instead of 'cache:') is caught."""
        with pytest.raises(ValidationError):
            Settings(completely_unknown_field="oops")  # type: ignore[call-arg]

    def test_unknown_nested_field_raises_validation_error(self) -> None:
        """A typo like 'ttl_second' is caught instead of silently using the default."""
        with pytest.raises(ValidationError):
            CacheSettings(ttl_second=60)  # type: ignore[call-arg]
