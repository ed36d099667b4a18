"""
Ferod: a small framework on top of discord.py.

This package hosts:
- command and event listener descriptors (ferod.structures)
- file discovery for command/listener modules (ferod.loader)
- application command reconciliation (ferod.sync)
- project config loading and validation (ferod.config)
- the `ferod` scaffolding CLI (ferod.cli)
"""

from ferod.config import ClientOptions, ConfigValidationError, get_config, get_token
from ferod.errors import (
    DescriptorError,
    FerodError,
    FetchError,
    HandlerError,
    InvalidModuleError,
    MissingFieldError,
    RegistrationError,
    UnexpectedFieldError,
)
from ferod.structures import (
    Command,
    CommandBuilder,
    CommandRegistry,
    CommandType,
    EventListener,
    MessageCommand,
    Option,
    OptionType,
    SlashCommand,
    UserCommand,
    get_options,
)
from ferod.structures.client import Client, ClientState
from ferod.sync import ReconcileReport, Reconciler, RemoteCommand, Scope

__version__ = "0.1.0"

__all__ = [
    "Client",
    "ClientOptions",
    "ClientState",
    "Command",
    "CommandBuilder",
    "CommandRegistry",
    "CommandType",
    "ConfigValidationError",
    "DescriptorError",
    "EventListener",
    "FerodError",
    "FetchError",
    "HandlerError",
    "InvalidModuleError",
    "MessageCommand",
    "MissingFieldError",
    "Option",
    "OptionType",
    "ReconcileReport",
    "Reconciler",
    "RegistrationError",
    "RemoteCommand",
    "Scope",
    "SlashCommand",
    "UnexpectedFieldError",
    "UserCommand",
    "get_config",
    "get_options",
    "get_token",
]
