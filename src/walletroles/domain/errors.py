"""Error taxonomy shared by domain services and adapters."""

from __future__ import annotations

from enum import StrEnum


class InvalidAddressError(ValueError):
    """Raised when a wallet address fails the syntactic check."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Invalid Cardano wallet address: {address!r}")
        self.address = address


class NoActiveChallengeError(LookupError):
    """Raised when a proof is submitted without a pending challenge."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"No verification in progress for user {user_id}")
        self.user_id = user_id


class ChainErrorKind(StrEnum):
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    MALFORMED_REQUEST = "malformed_request"
    UNAUTHORIZED = "unauthorized"
    OTHER = "other"


class ChainLookupError(RuntimeError):
    """Raised by the chain-state reader when a lookup cannot be answered."""

    def __init__(
        self,
        kind: ChainErrorKind,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


class RetriesExhaustedError(RuntimeError):
    """Raised when every attempt allowed by a retry policy failed retryably."""

    def __init__(self, last_error: ChainLookupError, *, attempts: int) -> None:
        super().__init__(f"Gave up after {attempts} attempts: {last_error.message}")
        self.last_error = last_error
        self.attempts = attempts


class PrivilegeError(RuntimeError):
    """Raised when the privilege manager rejects a roster, lookup or role change."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MemberNotFoundError(PrivilegeError):
    """Raised when a user is no longer a member of the guild."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"Member {user_id} not found in guild", status_code=404)
        self.user_id = user_id


class PersistenceError(RuntimeError):
    """Raised when a mapping store cannot be read or written."""
