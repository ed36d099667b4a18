"""
ferod/sync/reconciler.py

Brings the application commands registered in one scope into agreement with
the local command descriptors:

  1. fetch the remote commands for the scope (failure aborts the pass)
  2. create missing commands, edit changed ones (if enabled)
  3. delete remote commands with no local counterpart (if enabled)

Commands are matched by name inside the scope only. A failed create, edit or
delete is recorded and logged; the rest of the pass carries on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ferod.errors import FetchError, RegistrationError
from ferod.structures.command import Command
from ferod.sync.normalize import commands_equal
from ferod.sync.remote import CommandAPI, RemoteCommand, Scope


logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    scope: Scope
    created: list[str] = field(default_factory=list)
    edited: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # differs remotely, editing disabled
    failures: list[RegistrationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        return (
            f"{self.scope}: {len(self.created)} created, {len(self.edited)} edited, "
            f"{len(self.deleted)} deleted, {len(self.unchanged)} unchanged, "
            f"{len(self.skipped)} skipped, {len(self.failures)} failed"
        )


class Reconciler:
    def __init__(
        self,
        api: CommandAPI,
        scope: Scope = Scope.GLOBAL,
        *,
        edit_enabled: bool = False,
        delete_unused: bool = False,
    ) -> None:
        self.api = api
        self.scope = scope
        self.edit_enabled = edit_enabled
        self.delete_unused = delete_unused

    async def fetch(self) -> list[RemoteCommand]:
        try:
            return list(await self.api.fetch(self.scope))
        except Exception as e:  # noqa: BLE001
            raise FetchError(self.scope, e) from e

    async def reconcile(self, commands: Iterable[Command]) -> ReconcileReport:
        remote = await self.fetch()
        report = ReconcileReport(scope=self.scope)
        working: dict[str, RemoteCommand] = {r.name: r for r in remote}
        local_names: set[str] = set()

        for command in commands:
            local_names.add(command.name)
            record = working.get(command.name)
            if record is None:
                await self._create(command, working, report)
            elif commands_equal(command.to_payload(), record.to_payload()):
                report.unchanged.append(command.name)
            elif self.edit_enabled:
                await self._edit(command, record, working, report)
            else:
                logger.debug("Application command %s differs remotely; editing disabled", command.name)
                report.skipped.append(command.name)

        if self.delete_unused:
            for record in remote:
                if record.name not in local_names:
                    await self._delete(record, report)

        log = logger.warning if report.failures else logger.info
        log("Reconciled application commands in %s", report.summary())
        return report

    async def _create(self, command: Command, working: dict[str, RemoteCommand], report: ReconcileReport) -> None:
        try:
            working[command.name] = await self.api.create(command.to_payload(), self.scope)
        except Exception as e:  # noqa: BLE001
            self._fail(RegistrationError("create", command.name, e), e, report)
            return
        report.created.append(command.name)
        logger.info("Created application command %s", command.name)

    async def _edit(
        self,
        command: Command,
        record: RemoteCommand,
        working: dict[str, RemoteCommand],
        report: ReconcileReport,
    ) -> None:
        try:
            working[command.name] = await self.api.edit(record.id, command.to_payload(), self.scope)
        except Exception as e:  # noqa: BLE001
            self._fail(RegistrationError("edit", command.name, e), e, report)
            return
        report.edited.append(command.name)
        logger.info("Edited application command %s", command.name)

    async def _delete(self, record: RemoteCommand, report: ReconcileReport) -> None:
        try:
            await self.api.delete(record.id, self.scope)
        except Exception as e:  # noqa: BLE001
            self._fail(RegistrationError("delete", record.name, e), e, report)
            return
        report.deleted.append(record.name)
        logger.info("Deleted application command %s", record.name)

    @staticmethod
    def _fail(error: RegistrationError, cause: Exception, report: ReconcileReport) -> None:
        report.failures.append(error)
        logger.error("%s", error, exc_info=cause)
