"""Bring every verified user's managed guild roles in line with their holdings.

One pass reads the verified-wallet registry, fetches the guild role roster,
resolves membership, looks up all wallets of all members concurrently, runs the
entitlement engine per user, persists the snapshot collection and applies the
role diff. Passes are single-flight per job instance.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from walletroles.config.sync import DEFAULT_MAX_CONCURRENT_LOOKUPS
from walletroles.domain.entitlements import MANAGED_LABELS
from walletroles.domain.errors import MemberNotFoundError, PersistenceError, PrivilegeError
from walletroles.domain.model import EntitlementSnapshot

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

    from walletroles.domain.asset_inspector import AssetInspector, WalletAssets
    from walletroles.domain.entitlements import EntitlementEngine
    from walletroles.domain.model import AssetRecord
    from walletroles.domain.ports import MappingStore, PrivilegeManager
    from walletroles.domain.wallet_registry import VerifiedWalletRegistry

log = getLogger(__name__)


class RunStatus(StrEnum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class UserOutcome(StrEnum):
    UPDATED = "updated"
    NOT_A_MEMBER = "not_a_member"
    LOOKUP_FAILED = "lookup_failed"
    APPLY_FAILED = "apply_failed"


@dataclass(frozen=True, slots=True)
class RoleChangePlan:
    grant: tuple[str, ...] = ()
    revoke: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.grant and not self.revoke


def plan_role_changes(
    computed: Iterable[str],
    held: Iterable[str],
    managed: Collection[str] = MANAGED_LABELS,
) -> RoleChangePlan:
    """Diff computed labels against held role names.

    Only labels in ``managed`` are ever granted or revoked; a label that is
    already held is never granted again.
    """

    computed_managed = [label for label in dict.fromkeys(computed) if label in managed]
    held_set = set(held)
    grant = tuple(label for label in computed_managed if label not in held_set)
    revoke = tuple(
        sorted(label for label in held_set if label in managed and label not in computed_managed)
    )
    return RoleChangePlan(grant=grant, revoke=revoke)


@dataclass(frozen=True, slots=True)
class UserReconciliation:
    user_id: str
    outcome: UserOutcome
    labels: tuple[str, ...] = ()
    granted: tuple[str, ...] = ()
    revoked: tuple[str, ...] = ()
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class ReconciliationReport:
    status: RunStatus
    users: tuple[UserReconciliation, ...] = ()
    detail: str | None = None

    def for_user(self, user_id: str) -> UserReconciliation | None:
        for entry in self.users:
            if entry.user_id == user_id:
                return entry
        return None

    def count(self, outcome: UserOutcome) -> int:
        return sum(1 for entry in self.users if entry.outcome is outcome)


@dataclass(slots=True)
class _Member:
    user_id: str
    wallets: tuple[str, ...]
    held_role_ids: frozenset[str]
    lookups: list[WalletAssets] = field(default_factory=list["WalletAssets"])


class ReconciliationJob:
    def __init__(
        self,
        *,
        registry: VerifiedWalletRegistry,
        inspector: AssetInspector,
        engine: EntitlementEngine,
        privileges: PrivilegeManager,
        snapshot_store: MappingStore,
        managed_labels: Collection[str] = MANAGED_LABELS,
        max_concurrent_lookups: int = DEFAULT_MAX_CONCURRENT_LOOKUPS,
    ) -> None:
        if max_concurrent_lookups < 1:
            raise ValueError("max_concurrent_lookups must be at least 1")
        self._registry = registry
        self._inspector = inspector
        self._engine = engine
        self._privileges = privileges
        self._snapshot_store = snapshot_store
        self._managed = frozenset(managed_labels)
        self._max_concurrent_lookups = max_concurrent_lookups
        self._running = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._running.locked()

    async def run_all(self, only_users: Collection[str] | None = None) -> ReconciliationReport:
        """Run one pass; returns a ``skipped`` report if a pass is already in flight."""

        # ``locked()`` and the uncontended acquire below share one scheduling step.
        if self._running.locked():
            log.info("Role assignment already in progress, skipping")
            return ReconciliationReport(status=RunStatus.SKIPPED)
        async with self._running:
            return await self._run(only_users)

    async def _run(self, only_users: Collection[str] | None) -> ReconciliationReport:
        registry = await self._registry.all_wallets()
        if only_users is not None:
            wanted = set(only_users)
            registry = {user: wallets for user, wallets in registry.items() if user in wanted}
        log.info("Starting role reconciliation for %s users", len(registry))

        try:
            roster = dict(await self._privileges.role_ids_by_name())
        except PrivilegeError as exc:
            log.exception("Could not fetch guild roles, aborting reconciliation")
            return ReconciliationReport(status=RunStatus.FAILED, detail=str(exc))
        names_by_id = {role_id: name for name, role_id in roster.items()}

        results: list[UserReconciliation] = []
        members: list[_Member] = []
        for user_id, wallets in registry.items():
            try:
                held = await self._privileges.member_role_ids(user_id)
            except MemberNotFoundError:
                log.info("User %s is no longer a guild member, skipping", user_id)
                results.append(UserReconciliation(user_id, UserOutcome.NOT_A_MEMBER))
                continue
            except PrivilegeError as exc:
                log.warning("Could not fetch member %s: %s", user_id, exc)
                results.append(
                    UserReconciliation(user_id, UserOutcome.APPLY_FAILED, detail=str(exc))
                )
                continue
            members.append(_Member(user_id=user_id, wallets=wallets, held_role_ids=held))

        await self._lookup_all(members)

        snapshots: dict[str, object] = {}
        for member in members:
            outcome, snapshot = await self._reconcile_member(member, roster, names_by_id)
            results.append(outcome)
            if snapshot is not None:
                snapshots[member.user_id] = snapshot.to_payload()

        # Users whose state could not be read keep their last stored snapshot.
        unresolved = [
            result.user_id
            for result in results
            if result.user_id not in snapshots
            and result.outcome in {UserOutcome.LOOKUP_FAILED, UserOutcome.APPLY_FAILED}
        ]
        await self._save_snapshots(snapshots, merge=only_users is not None, keep=unresolved)

        report = ReconciliationReport(status=RunStatus.COMPLETED, users=tuple(results))
        log.info(
            "Role reconciliation finished: updated=%s, not_a_member=%s, "
            "lookup_failed=%s, apply_failed=%s",
            report.count(UserOutcome.UPDATED),
            report.count(UserOutcome.NOT_A_MEMBER),
            report.count(UserOutcome.LOOKUP_FAILED),
            report.count(UserOutcome.APPLY_FAILED),
        )
        return report

    async def _lookup_all(self, members: list[_Member]) -> None:
        semaphore = asyncio.Semaphore(self._max_concurrent_lookups)

        async def bounded(wallet: str) -> WalletAssets:
            async with semaphore:
                return await self._inspector.lookup(wallet)

        jobs = [(member, bounded(wallet)) for member in members for wallet in member.wallets]
        lookups = await asyncio.gather(*(job for _member, job in jobs))
        for (member, _job), lookup in zip(jobs, lookups, strict=True):
            member.lookups.append(lookup)

    async def _reconcile_member(
        self,
        member: _Member,
        roster: Mapping[str, str],
        names_by_id: Mapping[str, str],
    ) -> tuple[UserReconciliation, EntitlementSnapshot | None]:
        user_id = member.user_id
        failed = [lookup for lookup in member.lookups if not lookup.complete]
        if failed:
            detail = ", ".join(f"{lookup.wallet}: {lookup.failure}" for lookup in failed)
            log.warning("Leaving roles of user %s unchanged, lookups failed (%s)", user_id, detail)
            return UserReconciliation(user_id, UserOutcome.LOOKUP_FAILED, detail=detail), None

        assets: list[AssetRecord] = [
            record for lookup in member.lookups for record in lookup.records
        ]
        result = self._engine.compute(assets)
        snapshot = EntitlementSnapshot.from_result(user_id, result)
        log.info("User %s: tier %s, labels [%s]", user_id, result.tier, ", ".join(result.labels))

        held_names = [
            names_by_id[role_id] for role_id in member.held_role_ids if role_id in names_by_id
        ]
        plan = plan_role_changes(result.labels, held_names, self._managed)
        if plan.is_empty:
            log.debug("Roles of user %s already match their holdings", user_id)

        granted: list[str] = []
        revoked: list[str] = []
        try:
            for label in plan.revoke:
                await self._privileges.revoke_role(user_id, roster[label])
                revoked.append(label)
                log.info("Revoked %s from user %s", label, user_id)
            for label in plan.grant:
                role_id = roster.get(label)
                if role_id is None:
                    log.warning("Role %r does not exist in the guild, skipping", label)
                    continue
                await self._privileges.grant_role(user_id, role_id)
                granted.append(label)
                log.info("Granted %s to user %s", label, user_id)
        except PrivilegeError as exc:
            log.warning("Role update for user %s failed: %s", user_id, exc)
            return (
                UserReconciliation(
                    user_id,
                    UserOutcome.APPLY_FAILED,
                    labels=result.labels,
                    granted=tuple(granted),
                    revoked=tuple(revoked),
                    detail=str(exc),
                ),
                snapshot,
            )

        return (
            UserReconciliation(
                user_id,
                UserOutcome.UPDATED,
                labels=result.labels,
                granted=tuple(granted),
                revoked=tuple(revoked),
            ),
            snapshot,
        )

    async def _save_snapshots(
        self,
        snapshots: dict[str, object],
        *,
        merge: bool,
        keep: Collection[str] = (),
    ) -> None:
        try:
            if merge or keep:
                stored = await self._snapshot_store.load()
                if merge:
                    stored.update(snapshots)
                    snapshots = stored
                else:
                    carried = {user: stored[user] for user in keep if user in stored}
                    snapshots = {**carried, **snapshots}
            await self._snapshot_store.save(snapshots)
        except PersistenceError:
            log.exception("Could not persist entitlement snapshots")
