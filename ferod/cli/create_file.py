"""`ferod create command` and `ferod create event`: add files to an existing project."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import click
import discord
from rich.console import Console

from ferod.cli.files import checked_slug, find_project, identifier, render, template_path
from ferod.config.validator import ConfigValidationError


console = Console()

COMMAND_TYPES = ("chat_input", "user", "message")
DEFAULT_DESCRIPTION = "No description provided"
DEFAULT_CATEGORY = "General"

# discord.py event name -> handler arguments after `client`
EVENTS: dict[str, tuple[str, ...]] = {
    "ready": (),
    "resumed": (),
    "message": ("message",),
    "message_edit": ("before", "after"),
    "message_delete": ("message",),
    "interaction": ("interaction",),
    "member_join": ("member",),
    "member_remove": ("member",),
    "member_update": ("before", "after"),
    "guild_join": ("guild",),
    "guild_remove": ("guild",),
    "reaction_add": ("reaction", "user"),
    "reaction_remove": ("reaction", "user"),
    "voice_state_update": ("member", "before", "after"),
    "presence_update": ("before", "after"),
    "thread_create": ("thread",),
    "typing": ("channel", "user", "when"),
}


@dataclass
class CommandAnswers:
    name: str
    type: str = "chat_input"
    description: str = DEFAULT_DESCRIPTION
    category: str = DEFAULT_CATEGORY
    permissions: list[str] = field(default_factory=list)


@dataclass
class ListenerAnswers:
    name: str
    event: str


def parse_permissions(raw: str) -> list[str]:
    names = [p.strip() for p in raw.split(",") if p.strip()]
    unknown = [p for p in names if p not in discord.Permissions.VALID_FLAGS]
    if unknown:
        raise click.BadParameter(f"Unknown permission(s): {', '.join(unknown)}")
    return names


def prompt_command_answers(name: str | None, *, yes: bool) -> CommandAnswers:
    if yes:
        if not name:
            raise click.UsageError("A command name is required with --yes.")
        return CommandAnswers(name=name)

    name = name or click.prompt("What is the name of the command?")
    command_type = click.prompt(
        "What type of command do you want to create?",
        type=click.Choice(COMMAND_TYPES),
        default="chat_input",
    )
    description = ""
    if command_type == "chat_input":
        description = click.prompt("What is the description of the command?", default=DEFAULT_DESCRIPTION)
    category = click.prompt("What is the category of the command?", default=DEFAULT_CATEGORY)
    permissions = click.prompt(
        "Default member permissions (comma separated, empty for none)",
        default="",
        show_default=False,
        value_proc=parse_permissions,
    )
    return CommandAnswers(
        name=name,
        type=command_type,
        description=description,
        category=category,
        permissions=permissions,
    )


def prompt_listener_answers(name: str | None, *, yes: bool) -> ListenerAnswers:
    if yes:
        if not name:
            raise click.UsageError("A listener name is required with --yes.")
        event = name if name in EVENTS else "ready"
        return ListenerAnswers(name=name, event=event)

    name = name or click.prompt("What is the name of the listener?")
    event = click.prompt(
        "What event do you want to listen to?",
        type=click.Choice(list(EVENTS)),
        default="ready",
    )
    return ListenerAnswers(name=name, event=event)


def command_setters(answers: CommandAnswers) -> str:
    lines = [f".set_name({answers.name!r})"]
    if answers.type == "chat_input":
        lines.append(f".set_description({answers.description!r})")
    lines.append(f".set_category({answers.category!r})")
    if answers.type != "chat_input":
        lines.append(f".set_type({answers.type!r})")
    if answers.permissions:
        lines.append(".set_permissions({})".format(", ".join(repr(p) for p in answers.permissions)))
    return "".join(f"    {line}\n" for line in lines)


def _write_new_file(path: Path, content: str) -> Path:
    if path.exists():
        raise click.ClickException(f"{path.name} already exists.")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    console.print(f"[green]✓ Created {path}[/green]")
    return path


def _project(cwd: Path | None) -> tuple[Path, Path, Path]:
    try:
        root, options = find_project(cwd)
    except ConfigValidationError as e:
        raise click.ClickException(f"{e}. Run this inside a Ferod project.") from e
    return root, root / options.commands_path, root / options.event_listeners_path


def create_command(name: str | None, *, yes: bool, cwd: Path | None = None) -> Path:
    _, commands_dir, _ = _project(cwd)
    answers = prompt_command_answers(name, yes=yes)
    slug = checked_slug(answers.name)
    content = render(
        template_path("command.py-tpl").read_text(encoding="utf-8"),
        {
            "function": identifier(slug),
            "message": repr(f"`{answers.name}` is not implemented yet."),
            "setters": command_setters(answers),
        },
    )
    return _write_new_file(commands_dir / f"{slug}.py", content)


def create_listener(name: str | None, *, yes: bool, cwd: Path | None = None) -> Path:
    _, _, listeners_dir = _project(cwd)
    answers = prompt_listener_answers(name, yes=yes)
    slug = checked_slug(answers.name)
    function = slug if slug.startswith("on_") else f"on_{slug}"
    params = "".join(f", {arg}" for arg in EVENTS[answers.event])
    content = render(
        template_path("listener.py-tpl").read_text(encoding="utf-8"),
        {"event": repr(answers.event), "function": function, "params": params},
    )
    return _write_new_file(listeners_dir / f"{slug}.py", content)
