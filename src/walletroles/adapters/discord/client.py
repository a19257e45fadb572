"""Discord REST client for guild role management."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import TypeAdapter, ValidationError

from walletroles.adapters.http_resilience import ResilientClient
from walletroles.domain.errors import MemberNotFoundError, PrivilegeError

from .schema import ErrorPayload, MemberPayload, RolePayload

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from walletroles.config import DiscordConfig, ResilienceConfig
    from walletroles.domain.ports import PrivilegeManager

log = getLogger(__name__)

EPHEMERAL_FLAG = 1 << 6
_ROLE_LIST = TypeAdapter(list[RolePayload])


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = ErrorPayload.model_validate(response.json())
    except ValueError:
        return f"HTTP {response.status_code}"
    if payload.message:
        return f"HTTP {response.status_code}: {payload.message}"
    return f"HTTP {response.status_code}"


class DiscordRoleClient:
    """``PrivilegeManager`` for a single guild, using the bot token."""

    def __init__(
        self,
        config: DiscordConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
    ) -> None:
        self.config = config
        self._client = client_factory(config.resilience)

    async def __aenter__(self) -> DiscordRoleClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def _guild_path(self) -> str:
        return f"/guilds/{self.config.guild_id}"

    async def role_ids_by_name(self) -> dict[str, str]:
        response = await self._request("GET", f"{self._guild_path}/roles")
        try:
            roles = _ROLE_LIST.validate_python(response.json())
        except ValueError as exc:
            raise PrivilegeError("Unexpected guild roles payload") from exc
        roster: dict[str, str] = {}
        for role in sorted(roles, key=lambda role: role.position, reverse=True):
            if role.name in roster:
                log.warning("Duplicate guild role name %r, keeping the highest one", role.name)
                continue
            roster[role.name] = role.id
        return roster

    async def member_role_ids(self, user_id: str) -> frozenset[str]:
        path = f"{self._guild_path}/members/{user_id}"
        response = await self._request("GET", path, not_found=lambda: MemberNotFoundError(user_id))
        try:
            member = MemberPayload.model_validate(response.json())
        except ValueError as exc:
            raise PrivilegeError(f"Unexpected member payload for {user_id}") from exc
        return frozenset(member.roles)

    async def grant_role(self, user_id: str, role_id: str) -> None:
        await self._request("PUT", f"{self._guild_path}/members/{user_id}/roles/{role_id}")

    async def revoke_role(self, user_id: str, role_id: str) -> None:
        await self._request("DELETE", f"{self._guild_path}/members/{user_id}/roles/{role_id}")

    async def send_followup(
        self,
        application_id: str,
        interaction_token: str,
        content: str,
        *,
        ephemeral: bool = True,
    ) -> None:
        """Post a follow-up message to an interaction (valid for 15 minutes)."""

        body: dict[str, object] = {"content": content}
        if ephemeral:
            body["flags"] = EPHEMERAL_FLAG
        await self._request("POST", f"/webhooks/{application_id}/{interaction_token}", json=body)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: object = None,
        not_found: Callable[[], PrivilegeError] | None = None,
    ) -> httpx.Response:
        try:
            if json is None:
                response = await self._client.request(method, path)
            else:
                response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            raise PrivilegeError(f"Discord request {method} {path} failed: {exc}") from exc

        if response.status_code == httpx.codes.NOT_FOUND and not_found is not None:
            raise not_found()
        if response.is_error:
            message = _error_message(response)
            log.warning("Discord %s %s failed: %s", method, path, message)
            raise PrivilegeError(message, status_code=response.status_code)
        return response


if TYPE_CHECKING:

    def _privilege_check(client: DiscordRoleClient) -> PrivilegeManager:
        return client
