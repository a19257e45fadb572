"""Timing and concurrency defaults for verification and role sync."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .env import optional_env, optional_env_float, optional_env_int
from .errors import ConfigurationError

DEFAULT_RECONCILE_INTERVAL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_CONCURRENT_LOOKUPS = 5

DEFAULT_CHALLENGE_TIMEOUT_SECONDS = 15 * 60
DEFAULT_REMINDER_DELAY_SECONDS = 30.0
# Open range (0.1 ADA, 0.5 ADA) in lovelace.
DEFAULT_MIN_CHALLENGE_LOVELACE = 100_001
DEFAULT_MAX_CHALLENGE_LOVELACE = 499_999


class GetroleScope(StrEnum):
    ALL = "all"
    REQUESTER = "requester"


@dataclass(frozen=True, slots=True)
class SyncConfig:
    reconcile_interval_seconds: float = DEFAULT_RECONCILE_INTERVAL_SECONDS
    max_concurrent_lookups: int = DEFAULT_MAX_CONCURRENT_LOOKUPS
    getrole_scope: GetroleScope = GetroleScope.ALL


@dataclass(frozen=True, slots=True)
class VerificationConfig:
    challenge_timeout_seconds: float = DEFAULT_CHALLENGE_TIMEOUT_SECONDS
    reminder_delay_seconds: float = DEFAULT_REMINDER_DELAY_SECONDS
    min_amount_lovelace: int = DEFAULT_MIN_CHALLENGE_LOVELACE
    max_amount_lovelace: int = DEFAULT_MAX_CHALLENGE_LOVELACE

    def __post_init__(self) -> None:
        if not 0 < self.min_amount_lovelace <= self.max_amount_lovelace:
            raise ConfigurationError("Challenge amount range must be positive and ordered")


def get_sync_config() -> SyncConfig:
    hours = optional_env_float(
        "WALLETROLES_RECONCILE_INTERVAL_HOURS",
        DEFAULT_RECONCILE_INTERVAL_SECONDS / 3600,
    )
    if hours <= 0:
        raise ConfigurationError("WALLETROLES_RECONCILE_INTERVAL_HOURS must be positive")
    concurrency = optional_env_int(
        "WALLETROLES_MAX_CONCURRENT_LOOKUPS", DEFAULT_MAX_CONCURRENT_LOOKUPS
    )
    if concurrency < 1:
        raise ConfigurationError("WALLETROLES_MAX_CONCURRENT_LOOKUPS must be at least 1")
    scope_raw = optional_env("GETROLE_SCOPE", GetroleScope.ALL.value) or GetroleScope.ALL.value
    try:
        scope = GetroleScope(scope_raw.lower())
    except ValueError as exc:
        raise ConfigurationError(
            f"GETROLE_SCOPE must be 'all' or 'requester', got {scope_raw!r}"
        ) from exc
    return SyncConfig(
        reconcile_interval_seconds=hours * 3600,
        max_concurrent_lookups=concurrency,
        getrole_scope=scope,
    )


def get_verification_config() -> VerificationConfig:
    return VerificationConfig()
