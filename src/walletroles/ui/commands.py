"""Chat command handlers: ``/verify``, ``/hash`` and ``/getrole``.

Handlers are transport-agnostic: the hosting gateway passes the invoking user
id and the command options, and relays the returned ``CommandReply`` privately
to the invoker. Follow-up messages (the hash reminder and the timeout notice)
go through a ``send`` callable bound to the originating interaction.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from walletroles.config.sync import GetroleScope
from walletroles.domain.errors import InvalidAddressError, NoActiveChallengeError
from walletroles.domain.model import VerificationFailure
from walletroles.domain.reconciliation import RunStatus, UserOutcome

if TYPE_CHECKING:
    from collections.abc import Mapping

    from walletroles.domain.model import VerificationChallenge, VerificationResult
    from walletroles.domain.ports import ChallengeNotifier
    from walletroles.domain.reconciliation import ReconciliationJob
    from walletroles.domain.verification_session import VerificationSession
    from walletroles.domain.wallet_registry import VerifiedWalletRegistry

log = getLogger(__name__)

type SendFollowUp = Callable[[str], Awaitable[None]]

INVALID_WALLET_MESSAGE: Final = (
    '❌ Invalid wallet address. It must start with "addr1", be at least 58 characters '
    "long and contain only letters and digits."
)
NO_CHALLENGE_MESSAGE: Final = "❌ No verification in progress. Start with `/verify`."
REMINDER_MESSAGE: Final = "✏️ Submit your transaction hash now, type the command:\n `/hash`"
TIMEOUT_MESSAGE: Final = "⏱ Verification timed out. Retry with `/verify`."
GENERIC_ERROR_MESSAGE: Final = "❌ An error occurred. Try again later."
NO_WALLET_MESSAGE: Final = (
    "No wallet found. Please verify your Cardano wallet first. "
    "Type in /verify to get started."
)
ROLES_UPDATED_MESSAGE: Final = "Roles have been updated based on your wallet assets."
ASSIGNMENT_RUNNING_MESSAGE: Final = (
    "Role assignment is already running. Try `/getrole` again in a few minutes."
)
ASSIGNMENT_FAILED_MESSAGE: Final = (
    "An error occurred while processing your roles. Please try again later."
)
LOOKUP_FAILED_MESSAGE: Final = (
    "Your wallet holdings could not be read right now, so your roles were left unchanged. "
    "Try `/getrole` again later."
)

_RESTART_REASONS: Final = frozenset(
    {
        VerificationFailure.CHALLENGE_SUPERSEDED,
        VerificationFailure.CHALLENGE_EXPIRED,
        VerificationFailure.CHALLENGE_ALREADY_SATISFIED,
    }
)
_RETRY_LATER_REASONS: Final = frozenset(
    {
        VerificationFailure.RATE_LIMITED,
        VerificationFailure.UNAUTHORIZED,
        VerificationFailure.COLLABORATOR_ERROR,
        VerificationFailure.PERSISTENCE_FAILED,
    }
)


@dataclass(frozen=True, slots=True)
class CommandReply:
    content: str
    ephemeral: bool = True


class FollowUpNotifier:
    """``ChallengeNotifier`` that posts follow-ups to the originating interaction."""

    def __init__(self, send: SendFollowUp) -> None:
        self._send = send

    async def remind(self, challenge: VerificationChallenge) -> None:  # noqa: ARG002
        await self._send(REMINDER_MESSAGE)

    async def expired(self, challenge: VerificationChallenge) -> None:  # noqa: ARG002
        await self._send(TIMEOUT_MESSAGE)


def challenge_instructions(challenge: VerificationChallenge) -> str:
    return (
        "🔐 To verify:\n\n"
        f"1. Send **{challenge.amount_ada} ADA** from `{challenge.wallet}` to itself.\n"
        "2. Wait 30 seconds for transaction confirmation.\n"
        "3. Submit the transaction hash with `/hash`."
    )


def verification_failed_message(result: VerificationResult, wallet: str) -> str:
    header = f"❌ Verification failed: {result.message}"
    if result.reason in _RESTART_REASONS:
        return f"{header}\nRestart with `/verify`."
    if result.reason in _RETRY_LATER_REASONS:
        return f"{header}\nTry `/hash` again in a minute, or restart with `/verify`."
    return (
        f"{header}\nEnsure:\n"
        "- Hash is correct (64 hex characters)\n"
        f"- Transaction involves `{wallet}`\n"
        "- Transaction is confirmed on Cardano mainnet\n"
        "Wait 60 seconds and retry with `/hash`, or restart with `/verify`."
    )


class CommandHandlers:
    def __init__(
        self,
        *,
        session: VerificationSession,
        registry: VerifiedWalletRegistry,
        job: ReconciliationJob,
        getrole_scope: GetroleScope = GetroleScope.ALL,
    ) -> None:
        self._session = session
        self._registry = registry
        self._job = job
        self._getrole_scope = getrole_scope

    async def dispatch(
        self,
        command: str,
        user_id: str,
        options: Mapping[str, str],
        *,
        follow_up: SendFollowUp | None = None,
    ) -> CommandReply:
        try:
            if command == "verify":
                return await self.verify(user_id, options.get("wallet", ""), follow_up=follow_up)
            if command == "hash":
                return await self.submit_hash(user_id, options.get("txhash", ""))
            if command == "getrole":
                return await self.getrole(user_id)
        except Exception:  # noqa: BLE001
            log.exception("Command /%s from user %s failed", command, user_id)
            return CommandReply(GENERIC_ERROR_MESSAGE)
        return CommandReply(f"❌ Unknown command `/{command}`.")

    async def verify(
        self,
        user_id: str,
        wallet: str,
        *,
        follow_up: SendFollowUp | None = None,
    ) -> CommandReply:
        notifier: ChallengeNotifier | None = FollowUpNotifier(follow_up) if follow_up else None
        try:
            challenge = await self._session.start_challenge(user_id, wallet, notifier=notifier)
        except InvalidAddressError:
            log.info("User %s submitted an invalid wallet address", user_id)
            return CommandReply(INVALID_WALLET_MESSAGE)
        return CommandReply(challenge_instructions(challenge))

    async def submit_hash(self, user_id: str, tx_hash: str) -> CommandReply:
        challenge = self._session.active_challenge(user_id)
        try:
            result = await self._session.submit_proof(user_id, tx_hash)
        except NoActiveChallengeError:
            return CommandReply(NO_CHALLENGE_MESSAGE)
        wallet = challenge.wallet if challenge is not None else ""
        if result.verified:
            return CommandReply(
                f"✅ Wallet `{wallet}` \nverified, congrats! \n\n"
                "Use `/getrole` to assign your role and prove you are a Mfer."
            )
        return CommandReply(verification_failed_message(result, wallet))

    async def getrole(self, user_id: str) -> CommandReply:
        if not await self._registry.wallets_for(user_id):
            return CommandReply(NO_WALLET_MESSAGE)

        only_users = [user_id] if self._getrole_scope is GetroleScope.REQUESTER else None
        report = await self._job.run_all(only_users)
        if report.status is RunStatus.SKIPPED:
            return CommandReply(ASSIGNMENT_RUNNING_MESSAGE)
        if report.status is RunStatus.FAILED:
            return CommandReply(ASSIGNMENT_FAILED_MESSAGE)

        outcome = report.for_user(user_id)
        if outcome is None or outcome.outcome is UserOutcome.UPDATED:
            return CommandReply(ROLES_UPDATED_MESSAGE)
        if outcome.outcome is UserOutcome.LOOKUP_FAILED:
            return CommandReply(LOOKUP_FAILED_MESSAGE)
        return CommandReply(ASSIGNMENT_FAILED_MESSAGE)
