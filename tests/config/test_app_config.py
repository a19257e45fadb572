from __future__ import annotations

import os
from pathlib import Path

import pytest

from walletroles.config import (
    REQUIRED_ENV_VARS,
    ConfigurationError,
    GetroleScope,
    MissingConfigurationError,
    VerificationConfig,
    get_blockfrost_config,
    get_discord_config,
    get_storage_config,
    get_sync_config,
    load_app_config,
    require_env_vars,
)
from walletroles.config.blockfrost import BLOCKFROST_MAINNET_URL

def _set_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "bot-token")
    monkeypatch.setenv("DISCORD_GUILD_ID", "123456789")
    monkeypatch.setenv("BLOCKFROST_API_KEY", "mainnetKey")


def test_require_env_vars_reports_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DISCORD_GUILD_ID", "   ")

    with pytest.raises(MissingConfigurationError) as excinfo:
        require_env_vars(REQUIRED_ENV_VARS)

    message = str(excinfo.value)
    for name in REQUIRED_ENV_VARS:
        assert name in message


def test_require_env_vars_strips_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLOCKFROST_API_KEY", "  mainnetKey \n")

    assert require_env_vars(("BLOCKFROST_API_KEY",)) == {"BLOCKFROST_API_KEY": "mainnetKey"}


def test_load_app_config_fails_without_credentials() -> None:
    with pytest.raises(MissingConfigurationError):
        load_app_config()


def test_load_app_config_reads_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("WALLETROLES_DATA_DIR", str(tmp_path))

    config = load_app_config()

    assert config.blockfrost.project_id == "mainnetKey"
    assert config.blockfrost.resilience.base_url == BLOCKFROST_MAINNET_URL
    assert config.blockfrost.resilience.default_headers == {"project_id": "mainnetKey"}
    assert config.discord.guild_id == "123456789"
    assert config.discord.resilience.default_headers is not None
    assert config.discord.resilience.default_headers["Authorization"] == "Bot bot-token"
    assert config.storage.verified_path() == tmp_path.resolve() / "verified.json"
    assert config.sync.reconcile_interval_seconds == 24 * 60 * 60
    assert config.sync.max_concurrent_lookups == 5
    assert config.sync.getrole_scope is GetroleScope.ALL


def test_blockfrost_transport_leaves_rate_limits_to_domain(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("BLOCKFROST_API_KEY", "key")
    monkeypatch.setenv("BLOCKFROST_BASE_URL", "https://cardano-preprod.blockfrost.io/api/v0")

    config = get_blockfrost_config()

    assert config.resilience.base_url == "https://cardano-preprod.blockfrost.io/api/v0"
    assert 429 not in config.resilience.retry.status_forcelist
    assert 404 not in config.resilience.retry.status_forcelist


def test_discord_config_requires_token_and_guild(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "token")

    with pytest.raises(MissingConfigurationError, match="DISCORD_GUILD_ID"):
        get_discord_config()


def test_sync_config_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WALLETROLES_RECONCILE_INTERVAL_HOURS", "1.5")
    monkeypatch.setenv("WALLETROLES_MAX_CONCURRENT_LOOKUPS", "2")
    monkeypatch.setenv("GETROLE_SCOPE", "Requester")

    config = get_sync_config()

    assert config.reconcile_interval_seconds == 5400
    assert config.max_concurrent_lookups == 2
    assert config.getrole_scope is GetroleScope.REQUESTER


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("WALLETROLES_RECONCILE_INTERVAL_HOURS", "daily"),
        ("WALLETROLES_RECONCILE_INTERVAL_HOURS", "0"),
        ("WALLETROLES_MAX_CONCURRENT_LOOKUPS", "0"),
        ("WALLETROLES_MAX_CONCURRENT_LOOKUPS", "2.5"),
        ("GETROLE_SCOPE", "everyone"),
    ],
)
def test_sync_config_rejects_bad_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        get_sync_config()


def test_verification_config_rejects_inverted_range() -> None:
    with pytest.raises(ConfigurationError):
        VerificationConfig(min_amount_lovelace=500_000, max_amount_lovelace=100_000)


def test_storage_config_custom_attributes_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("WALLETROLES_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("WALLETROLES_ATTRIBUTES_FILE", "02-metadata.json")

    config = get_storage_config()

    assert config.attributes_path() == (tmp_path / "data").resolve() / "02-metadata.json"
    assert (tmp_path / "data").is_dir()
    assert config.snapshots_path(ensure=False).name == "roles.json"


@pytest.mark.skipif(os.name == "nt", reason="XDG layout applies to POSIX only")
def test_storage_config_defaults_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    config = get_storage_config()

    assert config.resolve_data_dir() == (tmp_path / "walletroles").resolve()
