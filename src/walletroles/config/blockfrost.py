"""Blockfrost (Cardano chain-state API) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

BLOCKFROST_MAINNET_URL = "https://cardano-mainnet.blockfrost.io/api/v0"
BLOCKFROST_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True)
class BlockfrostConfig:
    """Holds Blockfrost API configuration values."""

    project_id: str
    resilience: ResilienceConfig


def blockfrost_resilience(
    project_id: str, *, base_url: str = BLOCKFROST_MAINNET_URL
) -> ResilienceConfig:
    # 429 and 404 are left to the domain retry policy; the transport only retries 5xx.
    return ResilienceConfig(
        name="blockfrost",
        base_url=base_url,
        timeout_seconds=BLOCKFROST_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=2),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"project_id": project_id},
    )


def get_blockfrost_config(*, resilience: ResilienceConfig | None = None) -> BlockfrostConfig:
    values = require_env_vars(("BLOCKFROST_API_KEY",))
    project_id = values["BLOCKFROST_API_KEY"]
    base_url = optional_env("BLOCKFROST_BASE_URL", BLOCKFROST_MAINNET_URL) or BLOCKFROST_MAINNET_URL
    return BlockfrostConfig(
        project_id=project_id,
        resilience=resilience or blockfrost_resilience(project_id, base_url=base_url),
    )
