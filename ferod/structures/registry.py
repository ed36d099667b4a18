from __future__ import annotations

from collections.abc import Mapping
from typing import Iterable, Iterator

from ferod.errors import InvalidModuleError
from ferod.structures.command import Command


class CommandRegistry(Mapping[str, Command]):
    """
    Command descriptors keyed by name.

    Filled once while loading, then only read. A reload builds a new
    registry instead of mutating the live one.
    """

    def __init__(self, commands: Iterable[tuple[str, Command]] = ()) -> None:
        self._commands: dict[str, Command] = {}
        self._sources: dict[str, str] = {}
        for path, command in commands:
            self.add(command, path)

    def add(self, command: Command, path: str = "<memory>") -> None:
        if command.name in self._commands:
            raise InvalidModuleError(
                path, f"duplicate command name '{command.name}' (already defined in {self._sources[command.name]})"
            )
        self._commands[command.name] = command
        self._sources[command.name] = path

    def __getitem__(self, name: str) -> Command:
        return self._commands[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __repr__(self) -> str:
        return f"<CommandRegistry {list(self._commands)}>"

    def source_of(self, name: str) -> str | None:
        return self._sources.get(name)

    @property
    def categories(self) -> list[str]:
        return list(dict.fromkeys(c.category for c in self._commands.values()))

    def by_category(self, category: str) -> list[Command]:
        return [c for c in self._commands.values() if c.category == category]
