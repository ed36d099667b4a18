"""`ferod create app`: scaffold a new bot project."""

from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from rich.console import Console

from ferod.cli.files import checked_slug, copy_template, is_empty_dir, merge_requirements, template_path


console = Console()
logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "ferod-app"
ENV_FILE = ".env"
ENV_CONTENT = "DISCORD_TOKEN=\n"


@dataclass
class AppAnswers:
    name: str
    help_command: bool = True
    lint: bool = False
    git: bool = True
    install: bool = True

    @property
    def templates(self) -> list[str]:
        names = ["base"]
        if self.help_command:
            names.append("help")
        if self.lint:
            names.append("lint")
        return names


def prompt_app_answers(name: str | None, *, git: bool, install: bool, yes: bool) -> AppAnswers:
    """
    Ask the scaffolding questions. `git`/`install` are False when disabled
    by flag, in which case the question is not asked. `yes` accepts every
    default without prompting.
    """
    if yes:
        return AppAnswers(name=name or DEFAULT_APP_NAME, git=git, install=install)

    if not name:
        name = click.prompt("What is the name of your app?", default=DEFAULT_APP_NAME)
    return AppAnswers(
        name=name,
        help_command=click.confirm("Add a help command?", default=True),
        lint=click.confirm("Add a ruff lint setup?", default=False),
        git=git and click.confirm("Initialize a git repository?", default=True),
        install=install and click.confirm("Install dependencies?", default=True),
    )


def scaffold_project(answers: AppAnswers, directory: Path) -> Path:
    """Copy the selected templates into `directory`, which must be missing or empty."""
    if not is_empty_dir(directory):
        raise click.ClickException(f"Directory {directory} is not empty.")
    directory.mkdir(parents=True, exist_ok=True)

    context = {"name": answers.name, "footer": repr(answers.name)}
    requirements = []
    for name in answers.templates:
        requirements.append(copy_template(template_path(name), directory, context))
        logger.debug("Copied template %s into %s", name, directory)

    (directory / "requirements.txt").write_text(merge_requirements(*requirements), encoding="utf-8")
    (directory / ENV_FILE).write_text(ENV_CONTENT, encoding="utf-8")
    return directory


def run_step(description: str, args: list[str], cwd: Path) -> bool:
    console.print(f"[cyan]→[/cyan] {description}")
    try:
        result = subprocess.run(args, cwd=cwd, check=False)
    except FileNotFoundError:
        console.print(f"[yellow]Skipped: {args[0]} is not installed.[/yellow]")
        return False
    if result.returncode != 0:
        console.print(f"[yellow]{description} failed (exit code {result.returncode}).[/yellow]")
        return False
    return True


def create_app(name: str | None, *, no_install: bool, no_git: bool, yes: bool) -> Path:
    answers = prompt_app_answers(name, git=not no_git, install=not no_install, yes=yes)
    checked_slug(answers.name)
    directory = Path.cwd() / answers.name
    scaffold_project(answers, directory)

    if answers.git:
        run_step("Initializing git repository", ["git", "init", "--quiet"], directory)
    if answers.install:
        run_step(
            "Installing dependencies",
            [sys.executable, "-m", "pip", "install", "-r", "requirements.txt"],
            directory,
        )

    console.print(f"\n[green]✓ Created {answers.name}![/green]")
    console.print(f"  cd {answers.name}")
    console.print(f"  put your bot token in {ENV_FILE}, then run: python main.py")
    return directory
