"""
ferod/sync/remote.py

The remote side of reconciliation: where commands are registered (Scope),
what Discord stores for them (RemoteCommand), and how to talk to it
(CommandAPI, with DiscordCommandAPI as the production implementation).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol

import discord


@dataclass(frozen=True)
class Scope:
    guild_id: int | None = None

    GLOBAL: ClassVar[Scope]

    @classmethod
    def guild(cls, guild_id: int | str) -> Scope:
        return cls(int(guild_id))

    @property
    def is_global(self) -> bool:
        return self.guild_id is None

    def __str__(self) -> str:
        return "global scope" if self.is_global else f"guild {self.guild_id}"


Scope.GLOBAL = Scope()


@dataclass(frozen=True)
class RemoteCommand:
    id: int
    name: str
    type: int = discord.AppCommandType.chat_input.value
    description: str = ""
    options: list[dict[str, Any]] = field(default_factory=list, hash=False)
    default_member_permissions: str | None = None
    guild_id: int | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> RemoteCommand:
        guild_id = data.get("guild_id")
        return cls(
            id=int(data["id"]),
            name=data["name"],
            type=int(data.get("type", discord.AppCommandType.chat_input.value)),
            description=data.get("description") or "",
            options=list(data.get("options") or []),
            default_member_permissions=data.get("default_member_permissions"),
            guild_id=int(guild_id) if guild_id is not None else None,
        )

    @property
    def scope(self) -> Scope:
        return Scope.GLOBAL if self.guild_id is None else Scope.guild(self.guild_id)

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "options": self.options,
            "default_member_permissions": self.default_member_permissions,
        }


class CommandAPI(Protocol):
    async def fetch(self, scope: Scope) -> list[RemoteCommand]: ...

    async def create(self, payload: dict[str, Any], scope: Scope) -> RemoteCommand: ...

    async def edit(self, command_id: int, payload: dict[str, Any], scope: Scope) -> RemoteCommand: ...

    async def delete(self, command_id: int, scope: Scope) -> None: ...


class DiscordCommandAPI:
    """CommandAPI backed by a logged-in discord.Client's HTTP client."""

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    @property
    def application_id(self) -> int:
        application_id = self.client.application_id
        if application_id is None:
            raise RuntimeError("Application id unknown; log the client in first")
        return application_id

    async def fetch(self, scope: Scope) -> list[RemoteCommand]:
        http = self.client.http
        if scope.is_global:
            data = await http.get_global_commands(self.application_id)
        else:
            data = await http.get_guild_commands(self.application_id, scope.guild_id)
        return [RemoteCommand.from_payload(d) for d in data]

    async def create(self, payload: dict[str, Any], scope: Scope) -> RemoteCommand:
        http = self.client.http
        if scope.is_global:
            data = await http.upsert_global_command(self.application_id, payload)
        else:
            data = await http.upsert_guild_command(self.application_id, scope.guild_id, payload)
        return RemoteCommand.from_payload(data)

    async def edit(self, command_id: int, payload: dict[str, Any], scope: Scope) -> RemoteCommand:
        http = self.client.http
        if scope.is_global:
            data = await http.edit_global_command(self.application_id, command_id, payload)
        else:
            data = await http.edit_guild_command(self.application_id, scope.guild_id, command_id, payload)
        return RemoteCommand.from_payload(data)

    async def delete(self, command_id: int, scope: Scope) -> None:
        http = self.client.http
        if scope.is_global:
            await http.delete_global_command(self.application_id, command_id)
        else:
            await http.delete_guild_command(self.application_id, scope.guild_id, command_id)
