"""Read-only port onto the chain-state collaborator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class AmountLine:
    """Raw balance line item as reported for an address."""

    unit: str
    quantity: int


@dataclass(frozen=True, slots=True)
class TransactionParticipants:
    """Addresses found on either side of a transaction."""

    tx_hash: str
    inputs: frozenset[str]
    outputs: frozenset[str]

    def involves(self, address: str) -> bool:
        return address in self.inputs or address in self.outputs


@runtime_checkable
class ChainStateReader(Protocol):
    """Lookups against the chain indexer.

    Implementations raise ``ChainLookupError`` with a classified
    ``ChainErrorKind`` when a lookup fails.
    """

    async def address_amounts(self, address: str) -> Sequence[AmountLine]: ...

    async def transaction_participants(self, tx_hash: str) -> TransactionParticipants: ...
