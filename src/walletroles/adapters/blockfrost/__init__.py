"""Public interface for the Blockfrost adapter."""

from __future__ import annotations

from .client import BlockfrostClient, classify_error
from .schema import AddressPayload, AmountPayload, TransactionUtxosPayload, UtxoEntry
from .translator import translate_address_amounts, translate_transaction

__all__ = [
    "AddressPayload",
    "AmountPayload",
    "BlockfrostClient",
    "TransactionUtxosPayload",
    "UtxoEntry",
    "classify_error",
    "translate_address_amounts",
    "translate_transaction",
]
