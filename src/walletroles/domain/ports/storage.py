"""Port for the key-value stores backing registry and snapshots."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MappingStore(Protocol):
    """Whole-document mapping store.

    ``load`` returns ``{}`` for a store that does not exist yet and raises
    ``PersistenceError`` when existing content cannot be read; ``save`` replaces
    the whole mapping or raises ``PersistenceError``.
    """

    async def load(self) -> dict[str, object]: ...

    async def save(self, data: dict[str, object]) -> None: ...
