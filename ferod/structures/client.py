"""
ferod/structures/client.py

discord.Client subclass that loads commands and event listeners from disk
and keeps the bot's application commands in sync with them.

start() walks a fixed sequence of states, once:

  UNSTARTED → PATHS_CHECKED → LOGGED_IN → COMMANDS_LOADED
            → LISTENERS_BOUND → RECONCILED → (gateway connection)

Any exception on the way moves the client to FAILED and is re-raised.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from pathlib import Path
from typing import Any

import discord
from rich.console import Console
from rich.table import Table

from ferod.config.options import ClientOptions
from ferod.discord.errors import UNKNOWN_COMMAND_MESSAGE, handle_command_error, reply_ephemeral
from ferod.errors import HandlerError, InvalidModuleError
from ferod.loader import FileModuleSource, ModuleSource, collect
from ferod.structures.command import Command, CommandBuilder
from ferod.structures.event_listener import EventListener
from ferod.structures.registry import CommandRegistry
from ferod.sync.reconciler import ReconcileReport, Reconciler
from ferod.sync.remote import CommandAPI, DiscordCommandAPI, Scope


logger = logging.getLogger(__name__)

COMMAND_ATTRIBUTE = "command"
LISTENER_ATTRIBUTE = "listener"


class ClientState(enum.Enum):
    UNSTARTED = "unstarted"
    PATHS_CHECKED = "paths_checked"
    LOGGED_IN = "logged_in"
    COMMANDS_LOADED = "commands_loaded"
    LISTENERS_BOUND = "listeners_bound"
    RECONCILED = "reconciled"
    FAILED = "failed"


class Client(discord.Client):
    def __init__(
        self,
        options: ClientOptions,
        root: str | Path = ".",
        *,
        api: CommandAPI | None = None,
        command_source: ModuleSource | None = None,
        listener_source: ModuleSource | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("intents", options.build_intents())
        super().__init__(**kwargs)

        root = Path(root)
        if root.is_file():
            root = root.parent
        self.options = options
        self.commands_path = (root / options.commands_path).resolve()
        self.event_listeners_path = (root / options.event_listeners_path).resolve()

        self.command_api: CommandAPI = api or DiscordCommandAPI(self)
        self.command_source = command_source or FileModuleSource(self.commands_path, COMMAND_ATTRIBUTE)
        self.listener_source = listener_source or FileModuleSource(self.event_listeners_path, LISTENER_ATTRIBUTE)

        self.commands = CommandRegistry()
        self.listeners: dict[str, list[EventListener]] = {}
        self.load_errors: list[InvalidModuleError] = []
        self.last_report: ReconcileReport | None = None

        self.state = ClientState.UNSTARTED
        self.failure: BaseException | None = None
        self._listener_tasks: set[asyncio.Task[None]] = set()

    # ── Properties ──────────────────────────────────────────────────────────

    @property
    def scope(self) -> Scope:
        return self.options.active_scope

    @property
    def categories(self) -> list[str]:
        return self.commands.categories

    def get_commands_by_category(self, category: str) -> list[Command]:
        return self.commands.by_category(category)

    # ── Startup ─────────────────────────────────────────────────────────────

    async def start(self, token: str, *, reconnect: bool = True) -> None:
        if self.state is not ClientState.UNSTARTED:
            raise RuntimeError(f"start() may only be called once (client is {self.state.value})")
        try:
            await self.prepare(token)
        except BaseException as e:
            self._fail(e)
            raise
        await self.connect(reconnect=reconnect)

    async def prepare(self, token: str) -> None:
        """Everything start() does before opening the gateway connection."""
        self.check_paths()
        self.state = ClientState.PATHS_CHECKED

        await self.login(token)
        self.state = ClientState.LOGGED_IN

        self.commands = self.load_commands()
        self.state = ClientState.COMMANDS_LOADED

        bound = self.bind_listeners()
        self.state = ClientState.LISTENERS_BOUND

        if self.options.command_loaded_message:
            self.print_commands()
        logger.info("Loaded %d commands and %d event listeners.", len(self.commands), bound)

        self.last_report = await self.reconcile()
        self.state = ClientState.RECONCILED

    def _fail(self, error: BaseException) -> None:
        self.state = ClientState.FAILED
        self.failure = error
        logger.error("Client failed to start: %s", error)

    def check_paths(self) -> None:
        for label, path in (("commands", self.commands_path), ("event listeners", self.event_listeners_path)):
            if not path.exists():
                path.mkdir(parents=True, exist_ok=True)
                logger.warning("The %s directory has been created at %s", label, path)

    def load_commands(self) -> CommandRegistry:
        """
        Collect command descriptors into a new registry. Invalid files are
        skipped; an incomplete builder raises MissingFieldError.
        """
        entries, errors = collect(self.command_source, (Command, CommandBuilder))
        registry = CommandRegistry()
        for path, value in entries:
            command = value.build() if isinstance(value, CommandBuilder) else value
            try:
                registry.add(command, path)
            except InvalidModuleError as e:
                logger.error("Skipping %s", e)
                errors.append(e)
        self.load_errors = errors
        return registry

    def bind_listeners(self) -> int:
        entries, errors = collect(self.listener_source, EventListener)
        self.load_errors.extend(errors)
        for _, listener in entries:
            self.listeners.setdefault(listener.event, []).append(listener)
        return len(entries)

    async def reconcile(self) -> ReconcileReport:
        reconciler = Reconciler(
            self.command_api,
            self.scope,
            edit_enabled=self.options.edit_application_commands,
            delete_unused=self.options.delete_unused_application_commands,
        )
        return await reconciler.reconcile(self.commands.values())

    async def reload(self) -> ReconcileReport:
        """Reload command files and reconcile again. Listeners stay bound."""
        self.commands = self.load_commands()
        self.last_report = await self.reconcile()
        return self.last_report

    def print_commands(self, console: Console | None = None) -> None:
        table = Table(title="Commands")
        for column in ("name", "description", "type", "category", "options"):
            table.add_column(column)
        for name, command in self.commands.items():
            table.add_row(
                name,
                getattr(command, "description", ""),
                command.kind,
                command.category,
                str(len(getattr(command, "options", ()))),
            )
        (console or Console()).print(table)

    # ── Dispatch ────────────────────────────────────────────────────────────

    def dispatch(self, event_name: str, /, *args: Any, **kwargs: Any) -> None:
        super().dispatch(event_name, *args, **kwargs)
        for listener in self.listeners.get(event_name, ()):
            task = asyncio.create_task(
                listener.invoke(self, *args, **kwargs), name=f"ferod: on_{event_name}"
            )
            self._listener_tasks.add(task)
            task.add_done_callback(self._listener_tasks.discard)

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        if interaction.type is discord.InteractionType.application_command:
            await self.run_command(interaction)

    async def run_command(self, interaction: discord.Interaction) -> None:
        name = (interaction.data or {}).get("name", "")
        command = self.commands.get(name)
        if command is None:
            logger.warning("Received unknown command %s", name)
            await reply_ephemeral(interaction, UNKNOWN_COMMAND_MESSAGE.format(name=name))
            return
        try:
            await command.invoke(self, interaction)
        except HandlerError as e:
            await handle_command_error(interaction, e)
