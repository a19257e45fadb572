"""Public interface for the Discord adapter."""

from __future__ import annotations

from .client import EPHEMERAL_FLAG, DiscordRoleClient
from .schema import MemberPayload, RolePayload

__all__ = [
    "EPHEMERAL_FLAG",
    "DiscordRoleClient",
    "MemberPayload",
    "RolePayload",
]
