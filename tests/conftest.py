from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003

import pytest

from walletroles.config import AppConfig, BlockfrostConfig, DiscordConfig, StorageConfig
from walletroles.config.blockfrost import blockfrost_resilience
from walletroles.config.discord import discord_resilience

ENV_VARS = (
    "BLOCKFROST_API_KEY",
    "BLOCKFROST_BASE_URL",
    "DISCORD_BOT_TOKEN",
    "DISCORD_GUILD_ID",
    "GETROLE_SCOPE",
    "WALLETROLES_ATTRIBUTES_FILE",
    "WALLETROLES_DATA_DIR",
    "WALLETROLES_MAX_CONCURRENT_LOOKUPS",
    "WALLETROLES_RECONCILE_INTERVAL_HOURS",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    attributes = {"Xesserson Otwo1": {"Stamp Color": "Green"}}
    (tmp_path / "asset-attributes.json").write_text(json.dumps(attributes), encoding="utf-8")
    return AppConfig(
        blockfrost=BlockfrostConfig(
            project_id="project-test",
            resilience=blockfrost_resilience("project-test"),
        ),
        discord=DiscordConfig(
            bot_token="bot-test",
            guild_id="900",
            resilience=discord_resilience("bot-test"),
        ),
        storage=StorageConfig(data_dir=tmp_path),
    )
