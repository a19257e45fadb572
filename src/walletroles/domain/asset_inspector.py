"""Normalized native-asset holdings for a wallet."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from walletroles.domain.errors import ChainErrorKind, ChainLookupError, RetriesExhaustedError
from walletroles.domain.model import NATIVE_UNIT, POLICY_ID_LENGTH, AssetRecord, is_valid_address
from walletroles.domain.retry import ASSET_LOOKUP_RETRY_POLICY, RetryPolicyTable, call_with_retry

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from walletroles.domain.ports import AmountLine, ChainStateReader
    from walletroles.domain.retry import Sleep

log = getLogger(__name__)


def decode_asset_name(unit: str) -> str:
    """Decode the hex name component of ``unit`` into display text.

    Names that are not valid UTF-8 (CIP-68 labels, binary names) decode with
    replacement characters instead of failing.
    """

    name_hex = unit[POLICY_ID_LENGTH:]
    try:
        raw = bytes.fromhex(name_hex)
    except ValueError:
        return name_hex
    return raw.decode("utf-8", errors="replace")


def asset_records(lines: Iterable[AmountLine]) -> list[AssetRecord]:
    return [
        AssetRecord(unit=line.unit, asset_name=decode_asset_name(line.unit), quantity=line.quantity)
        for line in lines
        if line.unit != NATIVE_UNIT
    ]


@dataclass(frozen=True, slots=True)
class WalletAssets:
    """Lookup outcome for one wallet.

    ``failure`` is set when the chain API could not answer for a reason other
    than the address being unknown; ``records`` is then empty but must not be
    read as "holds nothing".
    """

    wallet: str
    records: tuple[AssetRecord, ...] = ()
    failure: ChainErrorKind | None = None

    @property
    def complete(self) -> bool:
        return self.failure is None


class AssetInspector:
    def __init__(
        self,
        reader: ChainStateReader,
        *,
        retry_policy: RetryPolicyTable = ASSET_LOOKUP_RETRY_POLICY,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._reader = reader
        self._retry_policy = retry_policy
        self._sleep = sleep

    async def inspect(self, wallet: str) -> list[AssetRecord]:
        """Return the wallet's native assets; never raises for lookup problems."""

        return list((await self.lookup(wallet)).records)

    async def lookup(self, wallet: str) -> WalletAssets:
        if not is_valid_address(wallet):
            log.warning("Skipping invalid Cardano address %r", wallet)
            return WalletAssets(wallet=wallet)
        address = wallet.strip()

        async def fetch() -> Sequence[AmountLine]:
            return await self._reader.address_amounts(address)

        try:
            lines = await call_with_retry(
                fetch,
                policy=self._retry_policy,
                sleep=self._sleep,
                description=f"address {address}",
            )
        except RetriesExhaustedError as exc:
            log.warning("Address %s lookup gave up: %s", address, exc.last_error.message)
            return WalletAssets(wallet=address, failure=exc.last_error.kind)
        except ChainLookupError as exc:
            if exc.kind is ChainErrorKind.NOT_FOUND:
                # Addresses that never received funds are unknown to the indexer.
                log.info("Address %s not found on chain, treating as empty", address)
                return WalletAssets(wallet=address)
            log.warning("Address %s lookup failed (%s): %s", address, exc.kind, exc.message)
            return WalletAssets(wallet=address, failure=exc.kind)

        records = asset_records(lines)
        log.info("Found %s assets for wallet %s", len(records), address)
        return WalletAssets(wallet=address, records=tuple(records))
