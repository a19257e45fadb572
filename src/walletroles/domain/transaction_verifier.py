"""Check that a wallet took part in a given transaction."""

from __future__ import annotations

import asyncio
import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

from walletroles.domain.errors import ChainErrorKind, ChainLookupError, RetriesExhaustedError
from walletroles.domain.model import VerificationFailure, VerificationResult
from walletroles.domain.retry import TRANSACTION_RETRY_POLICY, RetryPolicyTable, call_with_retry

if TYPE_CHECKING:
    from walletroles.domain.ports import ChainStateReader, TransactionParticipants
    from walletroles.domain.retry import Sleep

log = getLogger(__name__)

TX_HASH_PATTERN: Final = re.compile(r"[0-9a-fA-F]{64}")

_TERMINAL_FAILURES: Final[dict[ChainErrorKind, VerificationFailure]] = {
    ChainErrorKind.MALFORMED_REQUEST: VerificationFailure.INVALID_REFERENCE,
    ChainErrorKind.UNAUTHORIZED: VerificationFailure.UNAUTHORIZED,
    ChainErrorKind.OTHER: VerificationFailure.COLLABORATOR_ERROR,
    ChainErrorKind.NOT_FOUND: VerificationFailure.NOT_FOUND_AFTER_RETRIES,
    ChainErrorKind.RATE_LIMITED: VerificationFailure.RATE_LIMITED,
}


def is_valid_tx_hash(tx_ref: str | None) -> bool:
    return tx_ref is not None and TX_HASH_PATTERN.fullmatch(tx_ref) is not None


class TransactionVerifier:
    def __init__(
        self,
        reader: ChainStateReader,
        *,
        retry_policy: RetryPolicyTable = TRANSACTION_RETRY_POLICY,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._reader = reader
        self._retry_policy = retry_policy
        self._sleep = sleep

    async def verify(self, tx_ref: str, expected_wallet: str) -> VerificationResult:
        """Succeed iff ``expected_wallet`` is among the transaction's inputs or outputs.

        Malformed references are rejected before any lookup. Rate limiting and
        not-yet-indexed transactions are retried per the policy table; other
        collaborator errors end verification immediately.
        """

        tx_hash = tx_ref.strip() if tx_ref else ""
        if not is_valid_tx_hash(tx_hash):
            log.info("Rejected malformed transaction hash %r", tx_ref)
            return VerificationResult.failure(VerificationFailure.MALFORMED_REFERENCE)

        async def fetch() -> TransactionParticipants:
            return await self._reader.transaction_participants(tx_hash)

        try:
            participants = await call_with_retry(
                fetch,
                policy=self._retry_policy,
                sleep=self._sleep,
                description=f"transaction {tx_hash}",
            )
        except RetriesExhaustedError as exc:
            return VerificationResult.failure(
                _TERMINAL_FAILURES[exc.last_error.kind], detail=exc.last_error.message
            )
        except ChainLookupError as exc:
            log.warning("Transaction %s lookup failed (%s): %s", tx_hash, exc.kind, exc.message)
            return VerificationResult.failure(_TERMINAL_FAILURES[exc.kind], detail=exc.message)

        is_sender = expected_wallet in participants.inputs
        is_receiver = expected_wallet in participants.outputs
        log.debug(
            "Transaction %s: sender=%s receiver=%s wallet=%s",
            tx_hash,
            is_sender,
            is_receiver,
            expected_wallet,
        )
        if is_sender or is_receiver:
            log.info("Transaction %s verified for wallet %s", tx_hash, expected_wallet)
            return VerificationResult.success()
        return VerificationResult.failure(VerificationFailure.NOT_A_PARTICIPANT)
