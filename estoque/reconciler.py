"""Write imported rows back into the data store, one collection at a time."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

from . import schema
from .errors import StoreError, ValidationError
from .models import validate_rows
from .notify import SUCCESS, WARNING, Notification
from .store import DataStore
from .workbook import ParsedWorkbook

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome for one sheet or collection."""

    collection: str  # display name
    success_count: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class ImportReport:
    results: list[ImportResult] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(r.success_count for r in self.results)

    @property
    def failed(self) -> list[ImportResult]:
        return [r for r in self.results if r.errors]

    def to_notification(self) -> Notification:
        """One consolidated message for the whole run."""
        failed = self.failed
        if failed:
            details = "; ".join(
                f"{r.collection}: {', '.join(r.errors)}" for r in failed
            )
            return Notification(
                "Importação concluída com avisos",
                f"{self.success_count} registros importados. Erros: {details}",
                WARNING,
            )
        return Notification(
            f"{self.success_count} registros importados com sucesso!",
            severity=SUCCESS,
        )


async def import_from_workbook(store: DataStore, parsed: ParsedWorkbook) -> ImportReport:
    """Insert the valid rows of every sheet, isolating failures per sheet.

    Each sheet's rows go to the store as one bulk insert. A sheet that could
    not be parsed, fails validation or is rejected by the store contributes
    an error entry and zero imported rows; the remaining sheets still run.
    """
    report = ImportReport()
    for sheet in parsed.sheets:
        result = ImportResult(sheet.display_name)
        report.results.append(result)

        if sheet.error is not None:
            result.errors.append(sheet.error)
            continue

        try:
            rows = validate_rows(sheet.collection, sheet.rows)
            await store.insert(sheet.collection, rows)
        except (ValidationError, StoreError) as e:
            logger.warning("Falha ao importar %s: %s", sheet.collection, e)
            result.errors.append(str(e))
            continue

        result.success_count = len(rows)
        logger.info("%s: %d registro(s) importado(s)", sheet.collection, len(rows))
    return report


async def import_from_backup(
    store: DataStore,
    contents: Mapping[str, list[dict]],
    selection: schema.Selection,
) -> ImportReport:
    """Upsert the selected collections of a backup in dependency order.

    Rows are written verbatim, identifiers included, so existing rows are
    replaced in place. Collections are written sequentially following
    schema.RESTORE_ORDER whatever order the backup lists them in; empty or
    unselected collections are skipped.
    """
    report = ImportReport()
    for collection in schema.RESTORE_ORDER:
        rows = contents.get(collection) or []
        if collection not in selection or not rows:
            continue

        result = ImportResult(schema.label_for(collection))
        report.results.append(result)
        try:
            await store.upsert(collection, list(rows))
        except StoreError as e:
            logger.warning("Falha ao restaurar %s: %s", collection, e)
            result.errors.append(str(e))
            continue

        result.success_count = len(rows)
        logger.info("%s: %d registro(s) restaurado(s)", collection, len(rows))
    return report
