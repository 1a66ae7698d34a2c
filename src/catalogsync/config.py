"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (CATALOGSYNC__CACHE__TTL_SECONDS=600)
  3. catalogsync.yaml       (searched in cwd, then the platform config dir)
  4. Hardcoded defaults

The config file is optional. Every field has a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("catalogsync")
_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("catalogsync")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "cache.db")


def _find_config_file() -> str | None:
    """Return the path of the first catalogsync.yaml found, or None."""
    candidates = [
        Path("catalogsync.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "catalogsync.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ttl_seconds: int = Field(default=3600, ge=0)
    db_path: str = _DEFAULT_DB_PATH
    # 0 disables the bound
    max_entries: int = Field(default=500, ge=0)


class PaginationSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    page_size: int = Field(default=20, ge=1, le=40)
    prefetch_threshold: int = Field(default=3, ge=1)


class SearchSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    debounce_ms: int = Field(default=300, ge=0)
    cancel_superseded: bool = True


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: CATALOGSYNC__CACHE__MAX_ENTRIES=100
        env_prefix="CATALOGSYNC__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    cache: CacheSettings = CacheSettings()
    pagination: PaginationSettings = PaginationSettings()
    search: SearchSettings = SearchSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
