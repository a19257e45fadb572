"""Aggregate application configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from .blockfrost import BlockfrostConfig, get_blockfrost_config
from .discord import DiscordConfig, get_discord_config
from .env import require_env_vars
from .storage import StorageConfig, get_storage_config
from .sync import SyncConfig, VerificationConfig, get_sync_config, get_verification_config

REQUIRED_ENV_VARS = ("DISCORD_BOT_TOKEN", "DISCORD_GUILD_ID", "BLOCKFROST_API_KEY")


@dataclass(frozen=True)
class AppConfig:
    blockfrost: BlockfrostConfig
    discord: DiscordConfig
    storage: StorageConfig
    sync: SyncConfig = field(default_factory=SyncConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)


def load_app_config() -> AppConfig:
    """Load every section, reporting all missing credentials together."""

    require_env_vars(REQUIRED_ENV_VARS)
    return AppConfig(
        blockfrost=get_blockfrost_config(),
        discord=get_discord_config(),
        storage=get_storage_config(),
        sync=get_sync_config(),
        verification=get_verification_config(),
    )
