#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
tiered cache. All configuration is centralized here to ensure consistency
across modules.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- IDE autocomplete for all settings
- Easy testing with override mechanisms
"""

import tempfile
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tiercache.core.config.constants import (
    DEFAULT_MEMCACHED_HOST,
    DEFAULT_MEMCACHED_PORT,
    DEFAULT_MEMCACHED_TIMEOUT,
    DEFAULT_REDIS_HOST,
    DEFAULT_REDIS_PORT,
    DEFAULT_REDIS_TIMEOUT,
    DEFAULT_SHM_DIR,
    DEFAULT_STATIC_CACHE_HIT_COUNTER,
    FILE_CACHE_SUBDIRECTORY,
)


def _default_file_dir() -> str:
    return str(Path(tempfile.gettempdir()) / FILE_CACHE_SUBDIRECTORY)


class CacheSettings(BaseSettings):
    """
    Facade behaviour: activation, promotion threshold and key namespace.

    CACHE_FALSY_IS_ABSENT keeps the historical behaviour of treating an empty
    or falsy stored value like a missing key.
    """

    CACHE_ENABLED: bool = Field(default=True, description="Master switch for the cache")
    CACHE_CHECK_FOR_USER: bool = Field(
        default=True, description="Disable the cache for admins, developers and same-host callers"
    )
    STATIC_CACHE_HIT_COUNTER: int = Field(
        default=DEFAULT_STATIC_CACHE_HIT_COUNTER,
        ge=0,
        description="Backend reads before a value is promoted into the process tier (0 = never)",
    )
    CACHE_PREFIX: str | None = Field(default=None, description="Explicit key prefix (overrides namespace)")
    CACHE_FALSY_IS_ABSENT: bool = Field(default=True, description="Treat falsy stored values as misses")
    CACHE_FILE_DIR: str = Field(default_factory=_default_file_dir, description="File backend directory")
    CACHE_SHM_DIR: str = Field(default=DEFAULT_SHM_DIR, description="Shared-memory filesystem root")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class BackendSettings(BaseSettings):
    """
    Connection settings for the remote backends probed during discovery.

    The defaults point at the local endpoints the discovery algorithm probes.
    Timeouts are kept short so an absent server does not stall startup.
    """

    MEMCACHED_HOST: str = Field(default=DEFAULT_MEMCACHED_HOST, description="Memcached host")
    MEMCACHED_PORT: int = Field(default=DEFAULT_MEMCACHED_PORT, description="Memcached port")
    MEMCACHED_TIMEOUT: float = Field(default=DEFAULT_MEMCACHED_TIMEOUT, description="Memcached timeout (s)")

    REDIS_HOST: str = Field(default=DEFAULT_REDIS_HOST, description="Redis server host")
    REDIS_PORT: int = Field(default=DEFAULT_REDIS_PORT, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_SOCKET_TIMEOUT: float = Field(default=DEFAULT_REDIS_TIMEOUT, description="Socket timeout (s)")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(
        default=DEFAULT_REDIS_TIMEOUT, description="Connection timeout (s)"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class NamespaceSettings(BaseSettings):
    """
    Opaque identifiers used to build the default key prefix.

    No validation is performed; values are joined with underscores.
    """

    SERVER_NAME: str = Field(default="", description="Deployment / site identifier")
    THEME: str = Field(default="", description="Site theme identifier")
    STAGE: str = Field(default="", description="Environment / stage identifier")
    LANGUAGE: str = Field(default="", description="Locale identifier")
    LANGUAGE_EXTRA: str = Field(default="", description="Secondary locale identifier")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)

    def default_prefix(self) -> str:
        """Build the default key prefix from the namespace values."""
        return "_".join(
            [self.SERVER_NAME, self.THEME, self.STAGE, self.LANGUAGE, self.LANGUAGE_EXTRA]
        )


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from tiercache.core.config.settings import get_settings

        settings = get_settings()
        threshold = settings.cache.STATIC_CACHE_HIT_COUNTER
        redis_host = settings.backend.REDIS_HOST

    Architectural Benefits:
    - Single source of truth for all configuration
    - Type-safe access with IDE autocomplete
    - Validation at startup (fail fast)
    - Easy testing with override mechanisms
    """

    # Cache settings
    CACHE_ENABLED: bool = Field(default=True, description="Master switch for the cache")
    CACHE_CHECK_FOR_USER: bool = Field(default=True, description="Apply the per-caller activation check")
    STATIC_CACHE_HIT_COUNTER: int = Field(default=DEFAULT_STATIC_CACHE_HIT_COUNTER, ge=0)
    CACHE_PREFIX: str | None = Field(default=None, description="Explicit key prefix")
    CACHE_FALSY_IS_ABSENT: bool = Field(default=True, description="Treat falsy stored values as misses")
    CACHE_FILE_DIR: str = Field(default_factory=_default_file_dir, description="File backend directory")
    CACHE_SHM_DIR: str = Field(default=DEFAULT_SHM_DIR, description="Shared-memory filesystem root")

    # Backend settings
    MEMCACHED_HOST: str = Field(default=DEFAULT_MEMCACHED_HOST, description="Memcached host")
    MEMCACHED_PORT: int = Field(default=DEFAULT_MEMCACHED_PORT, description="Memcached port")
    MEMCACHED_TIMEOUT: float = Field(default=DEFAULT_MEMCACHED_TIMEOUT, description="Memcached timeout (s)")
    REDIS_HOST: str = Field(default=DEFAULT_REDIS_HOST, description="Redis server host")
    REDIS_PORT: int = Field(default=DEFAULT_REDIS_PORT, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_SOCKET_TIMEOUT: float = Field(default=DEFAULT_REDIS_TIMEOUT, description="Socket timeout (s)")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=DEFAULT_REDIS_TIMEOUT, description="Connect timeout (s)")

    # Namespace settings
    SERVER_NAME: str = Field(default="", description="Deployment / site identifier")
    THEME: str = Field(default="", description="Site theme identifier")
    STAGE: str = Field(default="", description="Environment / stage identifier")
    LANGUAGE: str = Field(default="", description="Locale identifier")
    LANGUAGE_EXTRA: str = Field(default="", description="Secondary locale identifier")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    # Nested configuration views
    @property
    def cache(self) -> CacheSettings:
        """Get cache settings."""
        return CacheSettings(
            CACHE_ENABLED=self.CACHE_ENABLED,
            CACHE_CHECK_FOR_USER=self.CACHE_CHECK_FOR_USER,
            STATIC_CACHE_HIT_COUNTER=self.STATIC_CACHE_HIT_COUNTER,
            CACHE_PREFIX=self.CACHE_PREFIX,
            CACHE_FALSY_IS_ABSENT=self.CACHE_FALSY_IS_ABSENT,
            CACHE_FILE_DIR=self.CACHE_FILE_DIR,
            CACHE_SHM_DIR=self.CACHE_SHM_DIR,
        )

    @property
    def backend(self) -> BackendSettings:
        """Get backend connection settings."""
        return BackendSettings(
            MEMCACHED_HOST=self.MEMCACHED_HOST,
            MEMCACHED_PORT=self.MEMCACHED_PORT,
            MEMCACHED_TIMEOUT=self.MEMCACHED_TIMEOUT,
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
        )

    @property
    def namespace(self) -> NamespaceSettings:
        """Get namespace settings."""
        return NamespaceSettings(
            SERVER_NAME=self.SERVER_NAME,
            THEME=self.THEME,
            STAGE=self.STAGE,
            LANGUAGE=self.LANGUAGE,
            LANGUAGE_EXTRA=self.LANGUAGE_EXTRA,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
