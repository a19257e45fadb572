"""Translate Blockfrost payloads into chain port values."""

from __future__ import annotations

from typing import TYPE_CHECKING

from walletroles.domain.ports import AmountLine, TransactionParticipants

if TYPE_CHECKING:
    from .schema import AddressPayload, TransactionUtxosPayload


def translate_address_amounts(payload: AddressPayload) -> list[AmountLine]:
    return [AmountLine(unit=entry.unit, quantity=entry.quantity) for entry in payload.amount]


def translate_transaction(payload: TransactionUtxosPayload) -> TransactionParticipants:
    return TransactionParticipants(
        tx_hash=payload.tx_hash,
        inputs=frozenset(entry.address for entry in payload.inputs),
        outputs=frozenset(entry.address for entry in payload.outputs),
    )
