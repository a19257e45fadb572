"""Discord REST configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DISCORD_API_BASE = "https://discord.com/api/v10"
DISCORD_USER_AGENT = "DiscordBot (https://github.com/walletroles/walletroles, 0.1)"


@dataclass(frozen=True)
class DiscordConfig:
    bot_token: str
    guild_id: str
    resilience: ResilienceConfig


def discord_resilience(bot_token: str) -> ResilienceConfig:
    return ResilienceConfig(
        name="discord",
        base_url=DISCORD_API_BASE,
        timeout_seconds=15.0,
        retry=RetryPolicy(
            total=4,
            status_forcelist=frozenset({429, 500, 502, 503, 504}),
        ),
        ratelimit=RateLimit(max_calls=40, per_seconds=1.0),
        default_headers={
            "Authorization": f"Bot {bot_token}",
            "User-Agent": DISCORD_USER_AGENT,
        },
    )


def get_discord_config(*, resilience: ResilienceConfig | None = None) -> DiscordConfig:
    values = require_env_vars(("DISCORD_BOT_TOKEN", "DISCORD_GUILD_ID"))
    bot_token = values["DISCORD_BOT_TOKEN"]
    return DiscordConfig(
        bot_token=bot_token,
        guild_id=values["DISCORD_GUILD_ID"],
        resilience=resilience or discord_resilience(bot_token),
    )
