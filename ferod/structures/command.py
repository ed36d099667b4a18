"""
ferod/structures/command.py

Command descriptors. One frozen dataclass per application command kind:

  SlashCommand    chat input command, has a description and an options schema
  UserCommand     user context-menu action
  MessageCommand  message context-menu action

Descriptors are usually produced by CommandBuilder from a file in the
commands directory:

    command = (
        CommandBuilder()
        .set_name("ping")
        .set_description("Replies with pong")
        .set_category("Utility")
        .set_handler(ping)
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, ClassVar, Iterable, Sequence, Union

import discord
from discord.app_commands import Choice

from ferod.errors import HandlerError, MissingFieldError, UnexpectedFieldError


CommandHandler = Callable[..., Union[Awaitable[None], None]]

OptionType = discord.AppCommandOptionType
CommandType = discord.AppCommandType

_GROUPING_TYPES = (OptionType.subcommand, OptionType.subcommand_group)


def _coerce_enum(enum: Any, value: Any) -> Any:
    # discord.Enum only looks up raw values, members and names need handling first
    if isinstance(value, enum):
        return value
    if isinstance(value, str):
        try:
            return enum[value]
        except KeyError:
            raise ValueError(f"{value!r} is not a valid {enum.__name__}") from None
    return enum(value)


# ── Options ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Option:
    name: str
    description: str
    type: OptionType = OptionType.string
    required: bool = False
    choices: tuple[Choice, ...] = ()
    options: tuple[Option, ...] = ()
    min_value: float | None = None
    max_value: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    autocomplete: bool = False
    channel_types: tuple[discord.ChannelType, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
        }
        if self.required:
            data["required"] = True
        if self.choices:
            data["choices"] = [{"name": str(c.name), "value": c.value} for c in self.choices]
        if self.options:
            data["options"] = [o.to_dict() for o in self.options]
        for key in ("min_value", "max_value", "min_length", "max_length"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.autocomplete:
            data["autocomplete"] = True
        if self.channel_types:
            data["channel_types"] = [t.value for t in self.channel_types]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Option:
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            type=_coerce_enum(OptionType, data.get("type", OptionType.string)),
            required=bool(data.get("required", False)),
            choices=tuple(Choice(name=c["name"], value=c["value"]) for c in data.get("choices") or ()),
            options=tuple(cls.from_dict(o) for o in data.get("options") or ()),
            min_value=data.get("min_value"),
            max_value=data.get("max_value"),
            min_length=data.get("min_length"),
            max_length=data.get("max_length"),
            autocomplete=bool(data.get("autocomplete", False)),
            channel_types=tuple(_coerce_enum(discord.ChannelType, t) for t in data.get("channel_types") or ()),
        )

    @property
    def is_grouping(self) -> bool:
        return self.type in _GROUPING_TYPES


def _coerce_options(options: Iterable[Any]) -> tuple[Option, ...]:
    result: list[Option] = []
    for item in options:
        if isinstance(item, Option):
            result.append(item)
        elif isinstance(item, dict):
            result.append(Option.from_dict(item))
        elif isinstance(item, (list, tuple)):
            result.extend(_coerce_options(item))
        else:
            raise TypeError(f"Expected Option or dict, got {type(item).__name__}")
    return tuple(result)


def _coerce_permissions(values: Iterable[Any]) -> int:
    bits = 0
    for value in values:
        if isinstance(value, discord.Permissions):
            bits |= value.value
        elif isinstance(value, str):
            if value not in discord.Permissions.VALID_FLAGS:
                raise ValueError(f"Unknown permission flag: {value}")
            bits |= discord.Permissions(**{value: True}).value
        elif isinstance(value, int):
            bits |= value
        else:
            raise TypeError(f"Expected permission int, name or Permissions, got {type(value).__name__}")
    return bits


# ── Descriptors ───────────────────────────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class Command:
    name: str
    category: str
    handler: CommandHandler = field(compare=False, repr=False)
    permissions: int | None = None

    type: ClassVar[CommandType]

    def __post_init__(self) -> None:
        for name in ("name", "category"):
            if not getattr(self, name):
                raise MissingFieldError(name)
        if self.handler is None:
            raise MissingFieldError("handler")

    @property
    def kind(self) -> str:
        return self.type.name

    def to_payload(self) -> dict[str, Any]:
        """The application command payload sent to Discord."""
        return {
            "name": self.name,
            "type": self.type.value,
            "description": "",
            "default_member_permissions": str(self.permissions) if self.permissions is not None else None,
        }

    async def invoke(self, client: discord.Client, interaction: discord.Interaction) -> None:
        try:
            await discord.utils.maybe_coroutine(self.handler, client, interaction)
        except Exception as e:
            raise HandlerError(self.name, e) from e


@dataclass(frozen=True, kw_only=True)
class SlashCommand(Command):
    description: str
    options: tuple[Option, ...] = ()

    type: ClassVar[CommandType] = CommandType.chat_input

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.description:
            raise MissingFieldError("description")

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["description"] = self.description
        payload["options"] = [o.to_dict() for o in self.options]
        return payload

    def options_tree(self) -> list[list[Option]]:
        """
        Flatten the options schema into one row per invocable form:
        [group, sub-command, *arguments], [sub-command, *arguments] or [*arguments].
        """
        groups = [o for o in self.options if o.type is OptionType.subcommand_group]
        if groups:
            return [[g, sub, *sub.options] for g in groups for sub in g.options]
        subs = [o for o in self.options if o.type is OptionType.subcommand]
        if subs:
            return [[sub, *sub.options] for sub in subs]
        return [list(self.options)]

    @property
    def usage(self) -> str:
        lines = []
        for row in self.options_tree():
            parts = [f"/{self.name}"]
            for option in row:
                if option.is_grouping:
                    parts.append(option.name)
                elif option.required:
                    parts.append(f"<{option.name}>")
                else:
                    parts.append(f"[{option.name}]")
            lines.append(f"`{' '.join(parts)}`")
        return "\n".join(lines)

    @property
    def arguments(self) -> str:
        lines: list[str] = []
        for row in self.options_tree():
            prefix: list[str] = []
            for option in row:
                if option.is_grouping:
                    prefix.append(option.name)
                    line = f"`{' '.join(prefix)}`: {option.description}"
                else:
                    name = option.name if option.required else f"[{option.name}]"
                    label = " ".join([*prefix, name])
                    line = f"`{label} ({option.type.name.title()})`: {option.description}"
                if line not in lines:
                    lines.append(line)
        return "\n".join(lines)


@dataclass(frozen=True, kw_only=True)
class UserCommand(Command):
    type: ClassVar[CommandType] = CommandType.user


@dataclass(frozen=True, kw_only=True)
class MessageCommand(Command):
    type: ClassVar[CommandType] = CommandType.message


def get_options(interaction: discord.Interaction) -> dict[str, Any]:
    """
    Argument values of an application command interaction keyed by option
    name. Sub-command and group levels are flattened away.
    """
    values: dict[str, Any] = {}
    pending = list((interaction.data or {}).get("options", []))
    while pending:
        option = pending.pop(0)
        if option.get("type") in (OptionType.subcommand.value, OptionType.subcommand_group.value):
            pending[:0] = option.get("options", [])
            continue
        values[option["name"]] = option.get("value")
    return values


COMMAND_CLASSES: dict[CommandType, type[Command]] = {
    CommandType.chat_input: SlashCommand,
    CommandType.user: UserCommand,
    CommandType.message: MessageCommand,
}


# ── Builder ───────────────────────────────────────────────────────────────────

class CommandBuilder:
    """
    Mutable, fluent staging area for a command descriptor.

    Setters can be called in any order; nothing is validated until build()
    (or the data property) is used.
    """

    def __init__(self) -> None:
        self._name: str | None = None
        self._description: str | None = None
        self._category: str | None = None
        self._options: tuple[Option, ...] = ()
        self._permissions: int | None = None
        self._type = CommandType.chat_input
        self._handler: CommandHandler | None = None

    def set_name(self, name: str) -> CommandBuilder:
        self._name = name
        return self

    def set_description(self, description: str) -> CommandBuilder:
        self._description = description
        return self

    def set_category(self, category: str) -> CommandBuilder:
        self._category = category
        return self

    def set_options(self, *options: Option | dict[str, Any] | Sequence[Option | dict[str, Any]]) -> CommandBuilder:
        self._options = _coerce_options(options)
        return self

    def set_permissions(self, *permissions: int | str | discord.Permissions) -> CommandBuilder:
        """
        Default member permissions, ORed together. Unset means everyone can
        use the command; set_permissions(0) restricts it to administrators.
        """
        self._permissions = _coerce_permissions(permissions) if permissions else None
        return self

    def set_type(self, type: CommandType | int | str) -> CommandBuilder:
        self._type = _coerce_enum(CommandType, type)
        return self

    def set_handler(self, handler: CommandHandler) -> CommandBuilder:
        self._handler = handler
        return self

    def build(self) -> Command:
        if not self._name:
            raise MissingFieldError("name")
        if not self._category:
            raise MissingFieldError("category")
        if self._handler is None:
            raise MissingFieldError("handler")

        if self._type is CommandType.chat_input:
            if not self._description:
                raise MissingFieldError("description")
            return SlashCommand(
                name=self._name,
                description=self._description,
                category=self._category,
                options=self._options,
                permissions=self._permissions,
                handler=self._handler,
            )

        if self._description:
            raise UnexpectedFieldError("description", self._type.name)
        if self._options:
            raise UnexpectedFieldError("options", self._type.name)
        return COMMAND_CLASSES[self._type](
            name=self._name,
            category=self._category,
            permissions=self._permissions,
            handler=self._handler,
        )

    @property
    def data(self) -> Command:
        return self.build()
