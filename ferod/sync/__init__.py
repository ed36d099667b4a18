from .normalize import clean, commands_equal, project
from .reconciler import ReconcileReport, Reconciler
from .remote import CommandAPI, DiscordCommandAPI, RemoteCommand, Scope

__all__ = [
    "clean",
    "commands_equal",
    "project",
    "ReconcileReport",
    "Reconciler",
    "CommandAPI",
    "DiscordCommandAPI",
    "RemoteCommand",
    "Scope",
]
