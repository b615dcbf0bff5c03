"""
stepchain Configuration Module

Centralized configuration loaded from environment variables (and a .env file
when one is present).

Usage:
    from stepchain.config import get_config

    config = get_config()
    config.setup_logging()
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from stepchain.utils.logging import configure_logging

env_paths = [
    Path.cwd() / ".env",
    Path(__file__).parent.parent / ".env",
]
for env_path in env_paths:
    if env_path.exists():
        load_dotenv(env_path)
        break

logger = logging.getLogger(__name__)


def _get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


# ═══════════════════════════════════════════════════════════════════════════════
#                           CONFIGURATION DATACLASSES
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    json_output: bool = False
    include_timestamp: bool = True

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Load logging config from environment variables."""
        return cls(
            level=_get_env("STEPCHAIN_LOG_LEVEL", "INFO"),
            json_output=_get_env_bool("STEPCHAIN_LOG_JSON", False),
            include_timestamp=_get_env_bool("STEPCHAIN_LOG_TIMESTAMP", True),
        )


@dataclass
class ChainConfig:
    """Chain behaviour configuration."""

    # Raise CompletionError on a second complete() instead of ignoring it
    strict_completion: bool = False
    name_prefix: str = "chain"

    @classmethod
    def from_env(cls) -> "ChainConfig":
        """Load chain config from environment variables."""
        return cls(
            strict_completion=_get_env_bool("STEPCHAIN_STRICT_COMPLETION", False),
            name_prefix=_get_env("STEPCHAIN_NAME_PREFIX", "chain"),
        )


@dataclass
class Config:
    """Top-level stepchain configuration."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            logging=LoggingConfig.from_env(),
            chain=ChainConfig.from_env(),
        )

    def setup_logging(self) -> None:
        """
        Configure logging based on config settings.

        Usage:
            config = get_config()
            config.setup_logging()
        """
        configure_logging(
            level=self.logging.level,
            json_output=self.logging.json_output,
            include_timestamp=self.logging.include_timestamp,
        )
        logger.info(f"Logging configured at level: {self.logging.level}")

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "logging": {
                "level": self.logging.level,
                "json_output": self.logging.json_output,
                "include_timestamp": self.logging.include_timestamp,
            },
            "chain": {
                "strict_completion": self.chain.strict_completion,
                "name_prefix": self.chain.name_prefix,
            },
        }


# ═══════════════════════════════════════════════════════════════════════════════
#                           SINGLETON & FACTORY
# ═══════════════════════════════════════════════════════════════════════════════

_config: Config | None = None


def get_config() -> Config:
    """
    Get the global configuration instance (singleton).

    Loads from environment variables on first call.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
        logger.debug("stepchain configuration loaded from environment")
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config.from_env()
    logger.debug("stepchain configuration reloaded")
    return _config


def set_config(config: Config) -> None:
    """
    Set a custom configuration (for testing or programmatic config).

    Usage:
        from stepchain.config import ChainConfig, Config, set_config

        set_config(Config(chain=ChainConfig(strict_completion=True)))
    """
    global _config
    _config = config
    logger.debug("Custom stepchain configuration set")


__all__ = [
    "Config",
    "get_config",
    "reload_config",
    "set_config",
    "LoggingConfig",
    "ChainConfig",
]
