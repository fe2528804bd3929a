"""Build downloadable exports from the data store."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from . import schema
from .artifacts import (
    CSV_MEDIA_TYPE,
    JSON_MEDIA_TYPE,
    PDF_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    Artifact,
)
from .backup import dumps_envelope, to_envelope
from .delimited import to_delimited_text
from .errors import ValidationError
from .printable import DEFAULT_TITLE, DocumentHeader, render_printable
from .reports import REPORTS, build_report
from .store import DataStore
from .workbook import template_workbook, to_workbook, workbook_to_bytes

logger = logging.getLogger(__name__)

SPREADSHEET = "xlsx"
PRINTABLE = "pdf"
FORMATS = (SPREADSHEET, PRINTABLE)


def local_now() -> datetime:
    """Current time with the local UTC offset attached."""
    return datetime.now().astimezone()


class Exporter:
    """Reads collections from a store and turns them into artifacts.

    Filenames embed the current date (and minute for table exports), so two
    exports within the same minute share a name and the later one wins when
    saved.
    """

    def __init__(
        self,
        store: DataStore,
        header: DocumentHeader | None = None,
        clock=local_now,
    ) -> None:
        self._store = store
        self._header = header or DocumentHeader()
        self._clock = clock

    async def _read(self, collections: list[str]) -> dict[str, list[dict]]:
        # Any StoreError aborts the whole export
        results = await asyncio.gather(
            *(self._store.select_all(c) for c in collections)
        )
        return dict(zip(collections, results))

    async def export_selected(self, selection: schema.Selection, fmt: str) -> Artifact:
        """Export the selected collections as one workbook or one PDF.

        Raises:
            ValidationError: If nothing is selected or the format is unknown.
            StoreError: If any read fails.
        """
        collections = selection.selected()
        if not collections:
            raise ValidationError("Selecione pelo menos uma tabela")
        if fmt not in FORMATS:
            raise ValidationError(f"Formato desconhecido: {fmt}")

        data = await self._read(collections)
        now = self._clock()
        stem = f"exportacao-{now:%Y-%m-%d-%H%M}"
        logger.info("Exportando %s (%s)", ", ".join(collections), fmt)

        if fmt == SPREADSHEET:
            return Artifact(
                f"{stem}.xlsx",
                workbook_to_bytes(to_workbook(data)),
                XLSX_MEDIA_TYPE,
            )
        content = render_printable(
            data, title=DEFAULT_TITLE, header=self._header, generated_at=now
        )
        return Artifact(f"{stem}.pdf", content, PDF_MEDIA_TYPE)

    async def export_backup(self) -> Artifact:
        """Snapshot all six collections into a JSON backup."""
        data = await self._read(list(schema.COLLECTIONS))
        now = self._clock()
        envelope = to_envelope(data, exported_at=now)
        total = sum(len(rows) for rows in data.values())
        logger.info("Backup gerado com %d registro(s)", total)
        return Artifact(
            f"backup-estoque-{now:%Y-%m-%d}.json",
            dumps_envelope(envelope).encode("utf-8"),
            JSON_MEDIA_TYPE,
        )

    def export_template(self, collection: str) -> Artifact:
        """An empty import template with example rows for one collection."""
        if collection not in schema.COLLECTIONS:
            raise ValidationError(f"Tabela desconhecida: {collection}")
        now = self._clock()
        return Artifact(
            f"modelo-{collection}-{now:%Y-%m-%d}.xlsx",
            workbook_to_bytes(template_workbook(collection)),
            XLSX_MEDIA_TYPE,
        )

    async def export_report(self, name: str) -> Artifact:
        """Render a report dataset as CSV.

        Raises:
            ValidationError: If the report is unknown or has no rows.
        """
        if name not in REPORTS:
            raise ValidationError(f"Relatório desconhecido: {name}")
        rows = await build_report(self._store, name, today=self._clock().date())
        if not rows:
            raise ValidationError("Nenhum dado para exportar")
        return Artifact(
            f"{name}_{self._clock():%Y-%m-%d}.csv",
            to_delimited_text(rows).encode("utf-8"),
            CSV_MEDIA_TYPE,
        )
