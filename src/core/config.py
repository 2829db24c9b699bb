#!/usr/bin/env python3
"""
Configuration for the Web Vitals tracker.

Settings come from the process environment (optionally seeded from a
.env file), fall back to defaults and are validated as a whole.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from pathlib import Path

import pytz

from core.env_loader import load_env_file
from core.exceptions import ConfigurationError
from core.history_store import HISTORY_KEY, MAX_HISTORY
from core.models.analysis import Strategy
from integrations.pagespeed_client import PAGESPEED_API_URL

logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default)).strip()
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(name, f"expected an integer, got {raw!r}")


@dataclass
class ProviderConfig:
    """PageSpeed Insights API configuration."""
    api_url: str = PAGESPEED_API_URL
    api_key: Optional[str] = None
    timeout: int = 60
    max_concurrent: int = 5


@dataclass
class StorageConfig:
    """Durable history and export configuration."""
    storage_dir: Path = field(default_factory=lambda: Path.home() / '.webvitals')
    history_key: str = HISTORY_KEY
    max_history: int = MAX_HISTORY
    export_dir: Path = field(default_factory=lambda: Path('.'))


@dataclass
class ApplicationConfig:
    """Core application configuration."""
    default_strategy: str = Strategy.MOBILE.value
    display_timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"
    verbose_logging: bool = False


@dataclass
class Config:
    """All configuration sections."""
    provider: ProviderConfig
    storage: StorageConfig
    app: ApplicationConfig

    # Environment info
    environment: str = field(default_factory=lambda: os.getenv('ENVIRONMENT', 'development'))

    def has_api_key(self) -> bool:
        """Check if a PageSpeed API key is configured."""
        return bool(self.provider.api_key)

    def to_public_dict(self) -> Dict[str, Any]:
        """Configuration without secrets, for display."""
        return {
            'environment': self.environment,
            'api_url': self.provider.api_url,
            'api_key': 'configured' if self.has_api_key() else 'not set',
            'timeout': self.provider.timeout,
            'max_concurrent': self.provider.max_concurrent,
            'storage_dir': str(self.storage.storage_dir),
            'max_history': self.storage.max_history,
            'export_dir': str(self.storage.export_dir),
            'default_strategy': self.app.default_strategy,
            'display_timezone': self.app.display_timezone,
            'log_level': self.app.log_level,
        }


class ConfigManager:
    """Builds, validates and caches the Config from environment variables."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to .env file relative to project root
        """
        self._config: Optional[Config] = None
        load_env_file(env_file_path)

    def get_config(self, force_reload: bool = False) -> Config:
        """
        Return the cached configuration, building it on first use.

        Args:
            force_reload: Force reloading configuration from environment

        Returns:
            Validated Config
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""
        provider_config = ProviderConfig(
            api_url=os.getenv('PAGESPEED_API_URL', PAGESPEED_API_URL),
            api_key=os.getenv('PAGESPEED_API_KEY') or None,
            timeout=_int_env('PAGESPEED_TIMEOUT', 60),
            max_concurrent=_int_env('MAX_CONCURRENT_ANALYSES', 5)
        )

        storage_dir = os.getenv('WEBVITALS_STORAGE_DIR')
        storage_config = StorageConfig(
            storage_dir=Path(storage_dir).expanduser() if storage_dir else Path.home() / '.webvitals',
            export_dir=Path(os.getenv('EXPORT_DIR', '.')).expanduser()
        )

        app_config = ApplicationConfig(
            default_strategy=os.getenv('DEFAULT_STRATEGY', 'mobile').strip().lower(),
            display_timezone=os.getenv('DISPLAY_TIMEZONE', 'UTC').strip(),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            verbose_logging=os.getenv('VERBOSE_LOGGING', 'false').lower() == 'true'
        )

        config = Config(
            provider=provider_config,
            storage=storage_config,
            app=app_config
        )

        self._validate_config(config)
        return config

    def _validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        errors = []

        if not config.provider.api_url.startswith(('https://', 'http://')):
            errors.append("PAGESPEED_API_URL must be an http(s) URL")

        if config.provider.timeout < 1:
            errors.append("PAGESPEED_TIMEOUT must be at least 1 second")

        if config.provider.max_concurrent < 1 or config.provider.max_concurrent > 20:
            errors.append("MAX_CONCURRENT_ANALYSES must be between 1 and 20")

        if config.app.default_strategy not in [s.value for s in Strategy]:
            errors.append("DEFAULT_STRATEGY must be 'mobile' or 'desktop'")

        if config.app.display_timezone not in pytz.all_timezones_set:
            errors.append(f"DISPLAY_TIMEZONE '{config.app.display_timezone}' is not a known time zone")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.app.log_level not in valid_log_levels:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(valid_log_levels)}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        logger.debug("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        numeric_level = getattr(logging, config.app.log_level)
        logging.getLogger().setLevel(numeric_level)

        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            handler.setFormatter(logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S'))


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
