"""User-facing actions: run one operation and report it as a notification.

Every action returns its result (an Artifact or an ImportReport) on success
and None when the whole operation failed. Either way exactly one
notification is emitted.
"""

from __future__ import annotations

import logging
from pathlib import Path

from . import schema
from .artifacts import Artifact, read_file
from .backup import from_envelope, loads_envelope
from .errors import InterchangeError, ValidationError
from .exporter import SPREADSHEET, Exporter, local_now
from .notify import ERROR, SUCCESS, Notification, Notifier
from .printable import DocumentHeader
from .reconciler import ImportReport, import_from_backup, import_from_workbook
from .store import DataStore
from .workbook import from_workbook, load_workbook_bytes

logger = logging.getLogger(__name__)

# Failures that abort a whole action. ImportError covers missing extras.
_FAILURES = (InterchangeError, OSError, ImportError)


class DataInterchange:
    """Export, import and restore against one data store."""

    def __init__(
        self,
        store: DataStore,
        notifier: Notifier,
        header: DocumentHeader | None = None,
        clock=local_now,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._exporter = Exporter(store, header=header, clock=clock)

    def _success(self, title: str, description: str = "") -> None:
        self._notifier.notify(Notification(title, description, SUCCESS))

    def _failure(self, title: str, error: Exception, fallback: str = "") -> None:
        logger.warning("%s: %s", title, error)
        if isinstance(error, ValidationError):
            # Validation messages are already phrased for the user.
            self._notifier.notify(Notification(str(error), severity=ERROR))
            return
        self._notifier.notify(Notification(title, str(error) or fallback, ERROR))

    async def export_selected(
        self, selection: schema.Selection, fmt: str = SPREADSHEET
    ) -> Artifact | None:
        failure = "Erro ao exportar dados" if fmt == SPREADSHEET else "Erro ao gerar PDF"
        try:
            artifact = await self._exporter.export_selected(selection, fmt)
        except _FAILURES as e:
            self._failure(failure, e)
            return None
        if fmt == SPREADSHEET:
            self._success("Dados exportados com sucesso!")
        else:
            self._success("PDF gerado com sucesso!")
        return artifact

    async def export_backup(self) -> Artifact | None:
        try:
            artifact = await self._exporter.export_backup()
        except _FAILURES as e:
            self._failure("Erro ao gerar backup", e)
            return None
        self._success("Backup gerado com sucesso!", artifact.filename)
        return artifact

    def export_template(self, collection: str) -> Artifact | None:
        try:
            artifact = self._exporter.export_template(collection)
        except _FAILURES as e:
            self._failure("Erro ao gerar modelo", e)
            return None
        self._success("Modelo gerado com sucesso!")
        return artifact

    async def export_report(self, name: str) -> Artifact | None:
        try:
            artifact = await self._exporter.export_report(name)
        except _FAILURES as e:
            self._failure("Erro ao exportar relatório", e)
            return None
        self._success("Relatório exportado com sucesso!")
        return artifact

    async def import_workbook(self, content: bytes) -> ImportReport | None:
        """Import every recognized sheet of an uploaded workbook."""
        try:
            parsed = from_workbook(load_workbook_bytes(content))
            report = await import_from_workbook(self._store, parsed)
        except _FAILURES as e:
            self._failure("Erro ao importar arquivo", e, "Formato inválido")
            return None
        self._notifier.notify(report.to_notification())
        return report

    async def import_workbook_file(self, path: str | Path) -> ImportReport | None:
        try:
            content = read_file(path)
        except OSError as e:
            self._failure("Erro ao importar arquivo", e)
            return None
        return await self.import_workbook(content)

    async def restore_backup(
        self, content: bytes, selection: schema.Selection | None = None
    ) -> ImportReport | None:
        """Upsert the selected collections of a JSON backup.

        With no selection every collection is restored.
        """
        selection = selection if selection is not None else schema.Selection()
        try:
            if not selection:
                raise ValidationError("Selecione pelo menos uma tabela")
            contents = from_envelope(loads_envelope(content))
            report = await import_from_backup(self._store, contents, selection)
        except _FAILURES as e:
            self._failure("Erro ao restaurar backup", e, "Formato inválido")
            return None
        self._notifier.notify(report.to_notification())
        return report

    async def restore_backup_file(
        self, path: str | Path, selection: schema.Selection | None = None
    ) -> ImportReport | None:
        try:
            content = read_file(path)
        except OSError as e:
            self._failure("Erro ao restaurar backup", e)
            return None
        return await self.restore_backup(content, selection)
