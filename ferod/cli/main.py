"""
Entry point for the `ferod` command.

    ferod create app [NAME] [--no-install] [--no-git] [-y]
    ferod create command [NAME] [-y]
    ferod create event [NAME] [-y]      (aliases: listener, event-listener)
"""

from __future__ import annotations

import logging
import os

import click

from ferod import __version__
from ferod.cli.create_app import create_app
from ferod.cli.create_file import create_command, create_listener


class AliasedGroup(click.Group):
    aliases = {"listener": "event", "event-listener": "event"}

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))


yes_option = click.option("-y", "--yes", is_flag=True, help="Answer yes to all questions.")


@click.group(help="Create a new Ferod app, command or event listener.")
@click.version_option(__version__, "-v", "--version", prog_name="ferod")
def cli() -> None:
    if os.environ.get("DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s: %(message)s")


@cli.group(cls=AliasedGroup, help="Create a Ferod app, command or event listener.")
def create() -> None:
    pass


@create.command("app", help="Scaffold a new bot project in ./NAME.")
@click.argument("name", required=False)
@click.option("--no-install", "no_install", is_flag=True, help="Do not install dependencies.")
@click.option("--no-git", "no_git", is_flag=True, help="Do not initialize a git repository.")
@yes_option
def app_cmd(name: str | None, no_install: bool, no_git: bool, yes: bool) -> None:
    create_app(name, no_install=no_install, no_git=no_git, yes=yes)


@create.command("command", help="Add a command file to the current project.")
@click.argument("name", required=False)
@yes_option
def command_cmd(name: str | None, yes: bool) -> None:
    create_command(name, yes=yes)


@create.command("event", help="Add an event listener file to the current project.")
@click.argument("name", required=False)
@yes_option
def event_cmd(name: str | None, yes: bool) -> None:
    create_listener(name, yes=yes)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
