"""Per-user wallet ownership challenge lifecycle.

``no challenge -> pending -> {satisfied | expired | superseded}``

Each pending challenge owns two timers (reminder and expiry). Timers are tied
to the challenge id and are defused on every terminal transition, so a timer
belonging to a superseded challenge can never act on its successor.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from walletroles.config.sync import VerificationConfig
from walletroles.domain.errors import NoActiveChallengeError, PersistenceError
from walletroles.domain.model import (
    ChallengeStatus,
    VerificationChallenge,
    VerificationFailure,
    VerificationResult,
    normalize_address,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from uuid import UUID

    from walletroles.domain.ports import ChallengeNotifier
    from walletroles.domain.transaction_verifier import TransactionVerifier
    from walletroles.domain.wallet_registry import VerifiedWalletRegistry

log = getLogger(__name__)

_LOST_CHALLENGE_REASONS = {
    ChallengeStatus.SUPERSEDED: VerificationFailure.CHALLENGE_SUPERSEDED,
    ChallengeStatus.EXPIRED: VerificationFailure.CHALLENGE_EXPIRED,
    ChallengeStatus.SATISFIED: VerificationFailure.CHALLENGE_ALREADY_SATISFIED,
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


async def _fire_after(delay: float, callback: Callable[[], Awaitable[None]]) -> None:
    await asyncio.sleep(delay)
    await callback()


@dataclass(slots=True)
class _ActiveChallenge:
    challenge: VerificationChallenge
    notifier: ChallengeNotifier | None = None
    timers: list[asyncio.Task[None]] = field(default_factory=list["asyncio.Task[None]"])

    def arm(self, delay: float, callback: Callable[[], Awaitable[None]], *, name: str) -> None:
        self.timers.append(asyncio.create_task(_fire_after(delay, callback), name=name))

    def finish(self, status: ChallengeStatus) -> None:
        self.challenge = replace(self.challenge, status=status)
        self.defuse()

    def defuse(self) -> None:
        # An expiry timer finishing its own challenge must not cancel itself.
        current = asyncio.current_task()
        for task in self.timers:
            if task is not current and not task.done():
                task.cancel()
        self.timers.clear()


class VerificationSession:
    def __init__(
        self,
        *,
        verifier: TransactionVerifier,
        registry: VerifiedWalletRegistry,
        config: VerificationConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
        rng: random.Random | None = None,
    ) -> None:
        self._verifier = verifier
        self._registry = registry
        self._config = config or VerificationConfig()
        self._clock = clock
        self._rng = rng or random.SystemRandom()
        self._challenges: dict[str, _ActiveChallenge] = {}

    def active_challenge(self, user_id: str) -> VerificationChallenge | None:
        active = self._challenges.get(user_id)
        return active.challenge if active else None

    async def start_challenge(
        self,
        user_id: str,
        wallet: str,
        *,
        notifier: ChallengeNotifier | None = None,
    ) -> VerificationChallenge:
        """Issue a fresh challenge, superseding any pending one for ``user_id``.

        Raises ``InvalidAddressError`` before touching existing state when the
        address fails the syntactic check.
        """

        address = normalize_address(wallet)
        challenge = VerificationChallenge(
            user_id=user_id,
            wallet=address,
            amount_lovelace=self._rng.randint(
                self._config.min_amount_lovelace, self._config.max_amount_lovelace
            ),
            issued_at=self._clock(),
        )

        previous = self._challenges.pop(user_id, None)
        if previous is not None:
            previous.finish(ChallengeStatus.SUPERSEDED)
            log.info(
                "Superseded challenge %s for user %s", previous.challenge.challenge_id, user_id
            )

        active = _ActiveChallenge(challenge=challenge, notifier=notifier)
        self._challenges[user_id] = active
        challenge_id = challenge.challenge_id
        active.arm(
            self._config.reminder_delay_seconds,
            lambda: self._remind(user_id, challenge_id),
            name=f"challenge-reminder-{challenge_id}",
        )
        active.arm(
            self._config.challenge_timeout_seconds,
            lambda: self._expire(user_id, challenge_id),
            name=f"challenge-expiry-{challenge_id}",
        )
        log.info(
            "Issued challenge %s for user %s: %s ADA from %s",
            challenge_id,
            user_id,
            challenge.amount_ada,
            address,
        )
        return challenge

    async def submit_proof(self, user_id: str, tx_ref: str) -> VerificationResult:
        """Verify ``tx_ref`` against the user's pending challenge.

        A negative result leaves the challenge pending so the user can retry
        with a corrected hash until it expires.
        """

        active = self._challenges.get(user_id)
        if active is None or not active.challenge.is_pending:
            raise NoActiveChallengeError(user_id)
        wallet = active.challenge.wallet

        result = await self._verifier.verify(tx_ref, wallet)
        if not result.verified:
            log.info("Proof for user %s rejected: %s", user_id, result.reason)
            return result

        # The verifier may have spent minutes retrying; the challenge may be gone.
        if self._challenges.get(user_id) is not active:
            reason = _LOST_CHALLENGE_REASONS.get(
                active.challenge.status, VerificationFailure.CHALLENGE_SUPERSEDED
            )
            log.info("Discarding proof for user %s: %s", user_id, reason)
            return VerificationResult.failure(reason)

        try:
            await self._registry.add(user_id, wallet)
        except PersistenceError as exc:
            log.exception("Could not record verified wallet for user %s", user_id)
            return VerificationResult.failure(VerificationFailure.PERSISTENCE_FAILED, str(exc))

        if self._challenges.get(user_id) is active:
            del self._challenges[user_id]
        active.finish(ChallengeStatus.SATISFIED)
        log.info("User %s verified wallet %s", user_id, wallet)
        return result

    async def close(self) -> None:
        """Defuse every timer; pending challenges are dropped."""

        for active in self._challenges.values():
            active.defuse()
        self._challenges.clear()

    def _current(self, user_id: str, challenge_id: UUID) -> _ActiveChallenge | None:
        active = self._challenges.get(user_id)
        if active is None or active.challenge.challenge_id != challenge_id:
            return None
        return active

    async def _remind(self, user_id: str, challenge_id: UUID) -> None:
        active = self._current(user_id, challenge_id)
        if active is None or active.notifier is None:
            return
        try:
            await active.notifier.remind(active.challenge)
        except Exception:  # noqa: BLE001
            log.exception("Reminder for user %s failed", user_id)

    async def _expire(self, user_id: str, challenge_id: UUID) -> None:
        active = self._current(user_id, challenge_id)
        if active is None:
            return
        del self._challenges[user_id]
        active.finish(ChallengeStatus.EXPIRED)
        log.info("Challenge %s for user %s expired", challenge_id, user_id)
        if active.notifier is None:
            return
        try:
            await active.notifier.expired(active.challenge)
        except Exception:  # noqa: BLE001
            log.exception("Expiry notice for user %s failed", user_id)
