"""Wallet addresses and on-chain asset records."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from walletroles.domain.errors import InvalidAddressError

ADDRESS_PREFIX: Final[str] = "addr1"
MIN_ADDRESS_LENGTH: Final[int] = 58
POLICY_ID_LENGTH: Final[int] = 56
NATIVE_UNIT: Final[str] = "lovelace"

_ADDRESS_ALPHABET = re.compile(r"[A-Za-z0-9]+")


type WalletAddress = str
type PolicyId = str


def is_valid_address(address: str | None) -> bool:
    """Return whether ``address`` looks like a Shelley mainnet payment address.

    Only the shape is checked (prefix, length, alphabet); the bech32 checksum is
    left to the chain API.
    """

    if not address:
        return False
    candidate = address.strip()
    return (
        candidate.startswith(ADDRESS_PREFIX)
        and len(candidate) >= MIN_ADDRESS_LENGTH
        and _ADDRESS_ALPHABET.fullmatch(candidate) is not None
    )


def normalize_address(address: str) -> WalletAddress:
    """Strip ``address`` and validate it, raising ``InvalidAddressError``."""

    if not is_valid_address(address):
        raise InvalidAddressError(address)
    return address.strip()


@dataclass(frozen=True, slots=True)
class AssetRecord:
    """One native-asset balance line item held by a wallet."""

    unit: str
    asset_name: str
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(f"Asset quantity must be non-negative, got {self.quantity}")

    @property
    def policy_id(self) -> PolicyId:
        return self.unit[:POLICY_ID_LENGTH]

    @property
    def asset_name_hex(self) -> str:
        return self.unit[POLICY_ID_LENGTH:]
