"""Application configuration helpers."""

from __future__ import annotations

from .app import REQUIRED_ENV_VARS, AppConfig, load_app_config
from .blockfrost import BlockfrostConfig, get_blockfrost_config
from .discord import DiscordConfig, get_discord_config
from .env import optional_env, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import StorageConfig, get_storage_config
from .sync import (
    GetroleScope,
    SyncConfig,
    VerificationConfig,
    get_sync_config,
    get_verification_config,
)

__all__ = [
    "REQUIRED_ENV_VARS",
    "AppConfig",
    "BlockfrostConfig",
    "ConfigurationError",
    "DiscordConfig",
    "GetroleScope",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "VerificationConfig",
    "configure_logging",
    "get_blockfrost_config",
    "get_discord_config",
    "get_storage_config",
    "get_sync_config",
    "get_verification_config",
    "load_app_config",
    "optional_env",
    "require_env_vars",
]
