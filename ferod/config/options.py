from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

import discord

from ferod.sync.remote import Scope

from .loader import _load_raw_config, get_config_path
from .validator import ConfigValidationError, validate_config


@dataclass
class ClientOptions:
    commands_path: str = "commands"
    event_listeners_path: str = "listeners"
    dev: bool = False
    dev_guild_id: int | None = None
    edit_application_commands: bool = False
    delete_unused_application_commands: bool = False
    command_loaded_message: bool = False
    intents: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.dev_guild_id is not None:
            self.dev_guild_id = int(self.dev_guild_id)
        if self.dev and self.dev_guild_id is None:
            raise ConfigValidationError("dev_guild_id must be provided if dev is set to true.")

    @classmethod
    def from_mapping(cls, cfg: dict[str, Any], config_path: str = "config.yaml") -> ClientOptions:
        validate_config(cfg, config_path)
        return cls(
            commands_path=cfg["commands_path"],
            event_listeners_path=cfg["event_listeners_path"],
            dev=cfg.get("dev", False),
            dev_guild_id=cfg.get("dev_guild_id"),
            edit_application_commands=cfg.get("edit_application_commands", False),
            delete_unused_application_commands=cfg.get("delete_unused_application_commands", False),
            command_loaded_message=cfg.get("command_loaded_message", False),
            intents=list(cfg.get("intents") or []),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str] | None = None) -> ClientOptions:
        cfg_path = path or get_config_path()
        return cls.from_mapping(_load_raw_config(cfg_path), str(cfg_path))

    @property
    def active_scope(self) -> Scope:
        return Scope.guild(self.dev_guild_id) if self.dev else Scope.GLOBAL

    def build_intents(self) -> discord.Intents:
        intents = discord.Intents.default()
        for name in self.intents:
            setattr(intents, name, True)
        return intents
