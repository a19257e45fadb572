"""Port onto the chat platform's role management."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping


@runtime_checkable
class PrivilegeManager(Protocol):
    """Role roster and per-member role changes for one guild.

    ``member_role_ids`` raises ``MemberNotFoundError`` for users who left the
    guild; every other failure surfaces as ``PrivilegeError``.
    """

    async def role_ids_by_name(self) -> Mapping[str, str]: ...

    async def member_role_ids(self, user_id: str) -> frozenset[str]: ...

    async def grant_role(self, user_id: str, role_id: str) -> None: ...

    async def revoke_role(self, user_id: str, role_id: str) -> None: ...
