"""Durable ``user id -> verified wallets`` mapping."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, cast

from walletroles.domain.errors import PersistenceError

if TYPE_CHECKING:
    from walletroles.domain.ports import MappingStore

log = getLogger(__name__)


def _wallet_tuple(raw: object) -> tuple[str, ...]:
    # Older files stored a bare string for users with one wallet.
    if isinstance(raw, str):
        values: list[object] = [raw]
    elif isinstance(raw, list):
        values = cast(list[object], raw)
    else:
        return ()
    wallets: list[str] = []
    for value in values:
        if isinstance(value, str) and value.strip() and value.strip() not in wallets:
            wallets.append(value.strip())
    return tuple(wallets)


class VerifiedWalletRegistry:
    """Append-only registry; only ``VerificationSession`` writes to it."""

    def __init__(self, store: MappingStore) -> None:
        self._store = store
        self._write_lock = asyncio.Lock()

    async def all_wallets(self) -> dict[str, tuple[str, ...]]:
        """Return every user's wallets; an unreadable store reads as empty."""

        try:
            raw = await self._store.load()
        except PersistenceError:
            log.exception("Could not read verified wallets, treating registry as empty")
            return {}
        registry: dict[str, tuple[str, ...]] = {}
        for user_id, value in raw.items():
            wallets = _wallet_tuple(value)
            if wallets:
                registry[str(user_id)] = wallets
        return registry

    async def wallets_for(self, user_id: str) -> tuple[str, ...]:
        return (await self.all_wallets()).get(user_id, ())

    async def add(self, user_id: str, wallet: str) -> bool:
        """Record ``wallet`` for ``user_id``; return ``False`` if it was already there.

        Raises ``PersistenceError`` if the store cannot be read or written. A
        read failure aborts the write so existing entries are never clobbered.
        """

        async with self._write_lock:
            raw = await self._store.load()
            existing = _wallet_tuple(raw.get(user_id))
            if wallet in existing:
                log.info("Wallet %s already verified for user %s", wallet, user_id)
                return False
            raw[user_id] = [*existing, wallet]
            await self._store.save(raw)
        log.info("Stored verified wallet for user %s", user_id)
        return True
