"""
File helpers for scaffolding: template lookup, copying with placeholder
rendering, requirements merging and project discovery.

Template conventions:
  - files ending in `-tpl` are rendered with string.Template (`$name`) and
    lose the suffix (`main.py-tpl` → `main.py`)
  - `gitignore` is written as `.gitignore`
  - `requirements.txt` is not copied; each template's list is merged instead
"""

from __future__ import annotations

import keyword
import re
import shutil
from pathlib import Path
from string import Template
from typing import Any, Iterable

import click

from ferod.config.loader import get_config_path
from ferod.config.options import ClientOptions


TEMPLATES_DIR = Path(__file__).parent / "templates"
TEMPLATE_SUFFIX = "-tpl"
REQUIREMENTS_FILE = "requirements.txt"
RENAMES = {"gitignore": ".gitignore"}

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def template_path(*parts: str) -> Path:
    return TEMPLATES_DIR.joinpath(*parts)


def render(text: str, context: dict[str, Any]) -> str:
    return Template(text).safe_substitute({k: str(v) for k, v in context.items()})


def is_empty_dir(path: Path) -> bool:
    return not path.exists() or (path.is_dir() and not any(path.iterdir()))


def copy_template(source: Path, destination: Path, context: dict[str, Any]) -> list[str]:
    """
    Copy one template directory into `destination`.
    Returns the lines of the template's requirements.txt (if any).
    """
    requirements: list[str] = []
    for path in sorted(source.rglob("*")):
        if path.is_dir():
            continue
        relative = path.relative_to(source)
        if relative.as_posix() == REQUIREMENTS_FILE:
            requirements = path.read_text(encoding="utf-8").splitlines()
            continue

        name = RENAMES.get(relative.name, relative.name)
        templated = name.endswith(TEMPLATE_SUFFIX)
        if templated:
            name = name.removesuffix(TEMPLATE_SUFFIX)
        target = destination / relative.parent / name
        target.parent.mkdir(parents=True, exist_ok=True)

        if templated:
            target.write_text(render(path.read_text(encoding="utf-8"), context), encoding="utf-8")
        else:
            shutil.copyfile(path, target)
    return requirements


def requirement_name(line: str) -> str | None:
    line = line.split("#", 1)[0].strip()
    if not line or line.startswith("-"):
        return None
    match = _REQUIREMENT_NAME.match(line)
    if not match:
        return None
    return re.sub(r"[-_.]+", "-", match.group(1)).lower()


def merge_requirements(*lists: Iterable[str]) -> str:
    """
    Merge requirement lists, keeping first-seen order. A later entry for the
    same project replaces the earlier one (so add-on templates can pin).
    """
    merged: dict[str, str] = {}
    for lines in lists:
        for line in lines:
            name = requirement_name(line)
            if name is not None:
                merged[name] = line.split("#", 1)[0].strip()
    return "".join(f"{line}\n" for line in merged.values())


def slugify(name: str) -> str:
    """File-safe version of a user supplied name. Never starts with `_`."""
    name = name.strip().removesuffix(".py")
    slug = re.sub(r"[^0-9a-zA-Z]+", "_", name).strip("_").lower()
    if not slug:
        raise ValueError(f"'{name}' does not contain any usable characters")
    return slug


def checked_slug(name: str) -> str:
    try:
        return slugify(name)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="'NAME'") from e


def identifier(slug: str) -> str:
    """Python identifier for a slug: `8ball` becomes `_8ball`, `import` becomes `import_`."""
    if slug[0].isdigit():
        return f"_{slug}"
    if keyword.iskeyword(slug):
        return f"{slug}_"
    return slug


def find_project(cwd: Path | None = None) -> tuple[Path, ClientOptions]:
    """
    Locate the project config (config.yaml or $FEROD_CONFIG) relative to `cwd`.
    Raises ConfigValidationError when missing or invalid.
    """
    config_path = (cwd or Path.cwd()) / get_config_path()
    return config_path.parent, ClientOptions.from_file(config_path)
