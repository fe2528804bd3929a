"""Spreadsheet (xlsx) export and import using openpyxl."""

from __future__ import annotations

import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime, time
from io import BytesIO
from typing import Any, Mapping, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from . import schema
from .errors import FormatError

SHEET_TITLE_MAX = 31
COLUMN_WIDTH = 20

NOT_RECOGNIZED = "Tabela não reconhecida"
NO_DATA = "Sem dados para importar"
NO_VALID_DATA = "Sem dados válidos"

# Sample rows for the import templates, in column order
_TEMPLATE_ROWS: dict[str, list[list[Any]]] = {
    schema.PRODUCTS: [
        ["Arroz Integral", "Marca X", 100, "kg", "2025-12-31", 5.99, 10, "disponivel"],
        ["Feijão Preto", "Marca Y", 50, "kg", "2025-06-30", 8.50, 5, "disponivel"],
    ],
    schema.STORAGE_LOCATIONS: [
        ["Almoxarifado Central", "Local principal de armazenamento"],
        ["Depósito Secundário", "Depósito auxiliar"],
    ],
    schema.INVOICES: [
        ["NF-001", "2025-01-15", 1500.00],
        ["NF-002", "2025-01-20", 2300.50],
    ],
    schema.PRODUCT_ENTRIES: [
        ["2025-01-15", "uuid-do-produto", 100, "Recebimento de compra"],
    ],
    schema.PRODUCT_EXITS: [
        ["2025-01-15", "uuid-do-produto", 10, "Distribuição para unidade"],
    ],
    schema.SHOPPING_LIST: [
        ["Arroz", 50, "kg", "alta", schema.NO],
        ["Feijão", 30, "kg", "media", schema.NO],
    ],
}


def _export_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return schema.YES if value else schema.NO
    return value


def _import_value(key: str, value: Any, flags: frozenset[str]) -> Any:
    if key in flags:
        return value is True or value in (schema.YES, "true")
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _new_sheet(wb: Workbook, collection: str):
    ws = wb.create_sheet(title=schema.label_for(collection)[:SHEET_TITLE_MAX])
    columns = schema.columns_for(collection)
    ws.append([c.label for c in columns])
    for idx in range(1, len(columns) + 1):
        ws.column_dimensions[get_column_letter(idx)].width = COLUMN_WIDTH
    return ws


def to_workbook(collections: Mapping[str, Sequence[Mapping[str, Any]]]) -> Workbook:
    """Build a workbook with one sheet per collection, in mapping order.

    Only the registry's export columns are written. Missing values become
    empty cells and booleans become "Sim"/"Não".
    """
    wb = Workbook()
    wb.remove(wb.active)
    for collection, rows in collections.items():
        ws = _new_sheet(wb, collection)
        columns = schema.columns_for(collection)
        for row in rows:
            ws.append([_export_value(row.get(c.key)) for c in columns])
    return wb


def template_workbook(collection: str) -> Workbook:
    """Build a single-sheet workbook with headers and example rows."""
    wb = Workbook()
    wb.remove(wb.active)
    ws = _new_sheet(wb, collection)
    for values in _TEMPLATE_ROWS[collection]:
        ws.append(values)
    return wb


def workbook_to_bytes(wb: Workbook) -> bytes:
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def load_workbook_bytes(data: bytes) -> Workbook:
    """Open an xlsx file from memory.

    Raises:
        FormatError: If the bytes are not a readable xlsx workbook.
    """
    try:
        return load_workbook(BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise FormatError(f"Arquivo Excel inválido: {e}") from e


@dataclass
class ParsedSheet:
    """Rows read from one worksheet, or the reason none were."""

    title: str
    collection: str | None
    rows: list[dict] = field(default_factory=list)
    error: str | None = None

    @property
    def display_name(self) -> str:
        if self.collection is None:
            return self.title
        return schema.label_for(self.collection)


@dataclass
class ParsedWorkbook:
    sheets: list[ParsedSheet] = field(default_factory=list)

    @property
    def rows(self) -> dict[str, list[dict]]:
        """Valid rows per collection, in sheet order."""
        result: dict[str, list[dict]] = {}
        for sheet in self.sheets:
            if sheet.collection is not None and sheet.error is None:
                result.setdefault(sheet.collection, []).extend(sheet.rows)
        return result

    @property
    def errors(self) -> list[tuple[str, str]]:
        return [(s.display_name, s.error) for s in self.sheets if s.error]


def _parse_sheet(ws, collection: str) -> ParsedSheet:
    result = ParsedSheet(title=ws.title, collection=collection)
    key_by_label = {c.label: c.key for c in schema.columns_for(collection)}
    flags = schema.BOOLEAN_COLUMNS.get(collection, frozenset())

    values_iter = ws.iter_rows(values_only=True)
    header = next(values_iter, None) or ()
    keys = [
        key_by_label.get(str(h).strip()) if h is not None else None for h in header
    ]

    data_rows = 0
    for values in values_iter:
        if all(v is None or v == "" for v in values):
            continue
        data_rows += 1
        mapped: dict[str, Any] = {}
        for key, value in zip(keys, values):
            if key is None or value is None or value == "":
                continue
            mapped[key] = _import_value(key, value, flags)
        if mapped:
            result.rows.append(mapped)

    if data_rows == 0:
        result.error = NO_DATA
    elif not result.rows:
        result.error = NO_VALID_DATA
    return result


def from_workbook(wb: Workbook) -> ParsedWorkbook:
    """Read every sheet back into rows keyed by store column names.

    Sheets that match no collection, or that hold no usable rows, are
    reported on the returned ParsedWorkbook and never stop the other sheets.
    """
    parsed = ParsedWorkbook()
    for ws in wb.worksheets:
        collection = schema.resolve_sheet(ws.title)
        if collection is None:
            parsed.sheets.append(
                ParsedSheet(title=ws.title, collection=None, error=NOT_RECOGNIZED)
            )
            continue
        parsed.sheets.append(_parse_sheet(ws, collection))
    return parsed
