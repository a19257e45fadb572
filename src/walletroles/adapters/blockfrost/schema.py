"""Pydantic models describing the Blockfrost API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BlockfrostBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AmountPayload(BlockfrostBaseModel):
    unit: str
    # Blockfrost sends quantities as decimal strings.
    quantity: int = Field(ge=0)


class AddressPayload(BlockfrostBaseModel):
    address: str
    amount: list[AmountPayload] = Field(default_factory=list)


class UtxoEntry(BlockfrostBaseModel):
    address: str
    amount: list[AmountPayload] = Field(default_factory=list)


class TransactionUtxosPayload(BlockfrostBaseModel):
    tx_hash: str = Field(alias="hash")
    inputs: list[UtxoEntry] = Field(default_factory=list)
    outputs: list[UtxoEntry] = Field(default_factory=list)


class ErrorPayload(BlockfrostBaseModel):
    status_code: int | None = None
    error: str | None = None
    message: str | None = None
