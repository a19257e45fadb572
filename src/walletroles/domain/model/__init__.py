"""Domain value types (pure, dependency-light)."""

from __future__ import annotations

from .assets import (
    ADDRESS_PREFIX,
    MIN_ADDRESS_LENGTH,
    NATIVE_UNIT,
    POLICY_ID_LENGTH,
    AssetRecord,
    PolicyId,
    WalletAddress,
    is_valid_address,
    normalize_address,
)
from .entitlements import CategoryHoldings, EntitlementResult, EntitlementSnapshot
from .verification import (
    LOVELACE_PER_ADA,
    ChallengeStatus,
    VerificationChallenge,
    VerificationFailure,
    VerificationResult,
)

__all__ = [
    "ADDRESS_PREFIX",
    "LOVELACE_PER_ADA",
    "MIN_ADDRESS_LENGTH",
    "NATIVE_UNIT",
    "POLICY_ID_LENGTH",
    "AssetRecord",
    "CategoryHoldings",
    "ChallengeStatus",
    "EntitlementResult",
    "EntitlementSnapshot",
    "PolicyId",
    "VerificationChallenge",
    "VerificationFailure",
    "VerificationResult",
    "WalletAddress",
    "is_valid_address",
    "normalize_address",
]
