"""Wallet ownership challenges and verification outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Final
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from datetime import datetime

LOVELACE_PER_ADA: Final[int] = 1_000_000


class ChallengeStatus(StrEnum):
    PENDING = "pending"
    SATISFIED = "satisfied"
    EXPIRED = "expired"
    SUPERSEDED = "superseded"


@dataclass(frozen=True, slots=True, kw_only=True)
class VerificationChallenge:
    """A one-time self-transfer a user must make to prove control of ``wallet``."""

    user_id: str
    wallet: str
    amount_lovelace: int
    issued_at: datetime
    status: ChallengeStatus = ChallengeStatus.PENDING
    challenge_id: UUID = field(default_factory=uuid4)

    @property
    def amount_ada(self) -> Decimal:
        return (Decimal(self.amount_lovelace) / LOVELACE_PER_ADA).quantize(Decimal("0.000001"))

    @property
    def is_pending(self) -> bool:
        return self.status is ChallengeStatus.PENDING


class VerificationFailure(StrEnum):
    MALFORMED_REFERENCE = "malformed_reference"
    NOT_A_PARTICIPANT = "not_a_participant"
    NOT_FOUND_AFTER_RETRIES = "not_found_after_retries"
    RATE_LIMITED = "rate_limited"
    INVALID_REFERENCE = "invalid_reference"
    UNAUTHORIZED = "unauthorized"
    COLLABORATOR_ERROR = "collaborator_error"
    CHALLENGE_SUPERSEDED = "challenge_superseded"
    CHALLENGE_EXPIRED = "challenge_expired"
    CHALLENGE_ALREADY_SATISFIED = "challenge_already_satisfied"
    PERSISTENCE_FAILED = "persistence_failed"


_FAILURE_MESSAGES: Final[dict[VerificationFailure, str]] = {
    VerificationFailure.MALFORMED_REFERENCE: (
        "Invalid transaction hash format (must be 64 hex characters)."
    ),
    VerificationFailure.NOT_A_PARTICIPANT: "Wallet not found in transaction inputs or outputs.",
    VerificationFailure.NOT_FOUND_AFTER_RETRIES: (
        "Transaction not found after retries. Wait longer and try again."
    ),
    VerificationFailure.RATE_LIMITED: "The chain API is rate limiting requests. Try again shortly.",
    VerificationFailure.INVALID_REFERENCE: "Invalid transaction hash.",
    VerificationFailure.UNAUTHORIZED: "The chain API rejected our credentials.",
    VerificationFailure.COLLABORATOR_ERROR: "The chain API returned an error.",
    VerificationFailure.CHALLENGE_SUPERSEDED: "A newer verification was started for this user.",
    VerificationFailure.CHALLENGE_EXPIRED: "The verification timed out before it completed.",
    VerificationFailure.CHALLENGE_ALREADY_SATISFIED: "This verification was already completed.",
    VerificationFailure.PERSISTENCE_FAILED: "The verified wallet could not be saved.",
}


@dataclass(frozen=True, slots=True)
class VerificationResult:
    verified: bool
    reason: VerificationFailure | None = None
    detail: str | None = None

    @classmethod
    def success(cls) -> VerificationResult:
        return cls(verified=True)

    @classmethod
    def failure(cls, reason: VerificationFailure, detail: str | None = None) -> VerificationResult:
        return cls(verified=False, reason=reason, detail=detail)

    @property
    def message(self) -> str:
        if self.verified:
            return "Transaction verified successfully."
        if self.reason is None:
            return "Verification failed."
        if self.detail and self.reason is VerificationFailure.COLLABORATOR_ERROR:
            return f"API error: {self.detail}"
        return _FAILURE_MESSAGES[self.reason]
