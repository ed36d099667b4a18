from .command import (
    Command,
    CommandBuilder,
    CommandType,
    MessageCommand,
    Option,
    OptionType,
    SlashCommand,
    UserCommand,
    get_options,
)
from .event_listener import EventListener
from .registry import CommandRegistry

__all__ = [
    "Command",
    "CommandBuilder",
    "CommandType",
    "MessageCommand",
    "Option",
    "OptionType",
    "SlashCommand",
    "UserCommand",
    "get_options",
    "EventListener",
    "CommandRegistry",
]
