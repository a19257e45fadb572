"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from walletroles.adapters.blockfrost import BlockfrostClient
from walletroles.adapters.discord import DiscordRoleClient
from walletroles.adapters.json_store import JsonFileStore, load_attribute_table
from walletroles.config import (
    AppConfig,
    get_blockfrost_config,
    get_storage_config,
    load_app_config,
)
from walletroles.domain.asset_inspector import AssetInspector
from walletroles.domain.entitlements import EntitlementEngine
from walletroles.domain.reconciliation import ReconciliationJob
from walletroles.domain.transaction_verifier import TransactionVerifier
from walletroles.domain.verification_session import VerificationSession
from walletroles.domain.wallet_registry import VerifiedWalletRegistry
from walletroles.scheduler import ReconciliationScheduler
from walletroles.ui.commands import CommandHandlers

if TYPE_CHECKING:
    from collections.abc import Collection

    from walletroles.domain.model import AssetRecord, EntitlementResult, VerificationResult
    from walletroles.domain.reconciliation import ReconciliationReport
    from walletroles.ui.commands import SendFollowUp

log = getLogger(__name__)


@dataclass(slots=True)
class Services:
    """Long-lived collaborators for one bot process."""

    config: AppConfig
    chain: BlockfrostClient
    discord: DiscordRoleClient
    registry: VerifiedWalletRegistry
    inspector: AssetInspector
    engine: EntitlementEngine
    session: VerificationSession
    job: ReconciliationJob
    handlers: CommandHandlers

    async def aclose(self) -> None:
        await self.session.close()
        await self.chain.aclose()
        await self.discord.aclose()


def build_engine(config: AppConfig | None = None) -> EntitlementEngine:
    storage = config.storage if config is not None else get_storage_config()
    return EntitlementEngine(attributes=load_attribute_table(storage.attributes_path()))


def build_services(config: AppConfig | None = None) -> Services:
    effective = config or load_app_config()
    chain = BlockfrostClient(effective.blockfrost)
    discord = DiscordRoleClient(effective.discord)
    registry = VerifiedWalletRegistry(JsonFileStore(effective.storage.verified_path()))
    inspector = AssetInspector(chain)
    engine = build_engine(effective)
    session = VerificationSession(
        verifier=TransactionVerifier(chain),
        registry=registry,
        config=effective.verification,
    )
    job = ReconciliationJob(
        registry=registry,
        inspector=inspector,
        engine=engine,
        privileges=discord,
        snapshot_store=JsonFileStore(effective.storage.snapshots_path()),
        max_concurrent_lookups=effective.sync.max_concurrent_lookups,
    )
    return Services(
        config=effective,
        chain=chain,
        discord=discord,
        registry=registry,
        inspector=inspector,
        engine=engine,
        session=session,
        job=job,
        handlers=CommandHandlers(
            session=session,
            registry=registry,
            job=job,
            getrole_scope=effective.sync.getrole_scope,
        ),
    )


def interaction_followup(
    discord: DiscordRoleClient, application_id: str, interaction_token: str
) -> SendFollowUp:
    """Bind ``CommandHandlers`` follow-ups to one interaction's webhook."""

    async def send(content: str) -> None:
        await discord.send_followup(application_id, interaction_token, content)

    return send


async def reconcile_once(
    only_users: Collection[str] | None = None,
    *,
    config: AppConfig | None = None,
) -> ReconciliationReport:
    """Run a single reconciliation pass against the configured guild."""

    services = build_services(config)
    scope = sorted(only_users) if only_users else "all"
    log.info("Running one-off reconciliation (users=%s)", scope)
    try:
        return await services.job.run_all(only_users)
    finally:
        await services.aclose()


def run_reconciliation(only_users: Collection[str] | None = None) -> ReconciliationReport:
    return asyncio.run(reconcile_once(only_users))


async def serve(*, config: AppConfig | None = None, stop: asyncio.Event | None = None) -> None:
    """Run the periodic reconciliation until ``stop`` is set (or forever)."""

    services = build_services(config)
    scheduler = ReconciliationScheduler(
        services.job, interval_seconds=services.config.sync.reconcile_interval_seconds
    )
    log.info("Serving guild %s", services.config.discord.guild_id)
    scheduler.start()
    try:
        if stop is None:
            await scheduler.wait()
        else:
            await stop.wait()
    finally:
        await scheduler.stop()
        await services.aclose()


async def _inspect_wallet(address: str) -> tuple[list[AssetRecord], EntitlementResult]:
    async with BlockfrostClient(get_blockfrost_config()) as chain:
        records = await AssetInspector(chain).inspect(address)
    return records, build_engine().compute(records)


def inspect_wallet(address: str) -> tuple[list[AssetRecord], EntitlementResult]:
    """Assets and computed labels for one wallet; makes no role changes."""

    return asyncio.run(_inspect_wallet(address))


async def _check_transaction(wallet: str, tx_ref: str) -> VerificationResult:
    async with BlockfrostClient(get_blockfrost_config()) as chain:
        return await TransactionVerifier(chain).verify(tx_ref, wallet)


def check_transaction(wallet: str, tx_ref: str) -> VerificationResult:
    return asyncio.run(_check_transaction(wallet, tx_ref))
