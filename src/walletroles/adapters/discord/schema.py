"""Pydantic models for the Discord REST payloads we read."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DiscordBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RolePayload(DiscordBaseModel):
    id: str
    name: str
    position: int = 0
    managed: bool = False


class UserPayload(DiscordBaseModel):
    id: str
    username: str | None = None


class MemberPayload(DiscordBaseModel):
    user: UserPayload | None = None
    roles: list[str] = Field(default_factory=list)


class ErrorPayload(DiscordBaseModel):
    code: int | None = None
    message: str | None = None
