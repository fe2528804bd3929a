"""Typed records for each collection.

Rows travel through the store and the codecs as plain dicts keyed by store
column names. Before a spreadsheet import is submitted, each row is parsed
into the record type of its collection so that missing required fields and
out-of-range enum values are reported per collection instead of surfacing as
an opaque store failure.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any, ClassVar, Mapping

from . import schema
from .errors import ValidationError

UNITS = ("unidade", "kg", "litro", "caixa", "pacote")
PRODUCT_STATUSES = ("disponivel", "baixo_estoque", "fora_de_estoque")
PRIORITIES = ("alta", "media", "baixa")

# Column kinds, named as shown to the user
NUMBER = "número"
DATE = "data AAAA-MM-DD"


def _col(
    name: str,
    *,
    required: bool = False,
    choices: tuple[str, ...] = (),
    kind: str | None = None,
):
    return field(
        default=None,
        metadata={
            "column": name, "required": required, "choices": choices, "kind": kind,
        },
    )


def _parse(kind: str | None, value: Any) -> Any:
    """Check a value against its column kind.

    Numeric strings become floats; dates must start with an ISO date.

    Raises:
        ValueError: The value does not fit the kind.
    """
    if kind == NUMBER:
        if isinstance(value, bool):
            raise ValueError(value)
        if isinstance(value, (int, float)):
            return value
        number = float(str(value).strip())
        if not math.isfinite(number):
            raise ValueError(value)
        return number
    if kind == DATE:
        date.fromisoformat(str(value)[:10])
    return value


class Record:
    """Mixin providing row <-> record conversion driven by field metadata."""

    collection: ClassVar[str]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        """Build a record from a store row, validating required/enum fields.

        Unknown keys are ignored. Values are kept as given, except numeric
        strings in number columns, which become floats.

        Raises:
            ValidationError: A required field is empty, an enum value is not
                one of the accepted choices, a number column holds text or a
                date column is not an ISO date.
        """
        values: dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            column = f.metadata["column"]
            value = row.get(column)
            if value == "":
                value = None
            if value is None and f.metadata["required"]:
                raise ValidationError(
                    f"{schema.label_for(cls.collection)}: "
                    f"campo obrigatório ausente: {column}"
                )
            choices = f.metadata["choices"]
            if value is not None and choices and value not in choices:
                raise ValidationError(
                    f"{schema.label_for(cls.collection)}: valor inválido "
                    f"para {column}: {value!r} ({' / '.join(choices)})"
                )
            kind = f.metadata["kind"]
            if value is not None and kind:
                try:
                    value = _parse(kind, value)
                except ValueError:
                    raise ValidationError(
                        f"{schema.label_for(cls.collection)}: valor inválido "
                        f"para {column}: {value!r} ({kind})"
                    ) from None
            values[f.name] = value
        return cls(**values)

    def to_row(self) -> dict[str, Any]:
        """Return the populated fields keyed by store column name."""
        row: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is not None:
                row[f.metadata["column"]] = value
        return row


@dataclass
class StorageLocation(Record):
    collection: ClassVar[str] = schema.STORAGE_LOCATIONS

    id: str | None = _col("id")
    name: str | None = _col("name", required=True)
    description: str | None = _col("description")


@dataclass
class Invoice(Record):
    collection: ClassVar[str] = schema.INVOICES

    id: str | None = _col("id")
    number: str | None = _col("numero", required=True)
    date: str | None = _col("data", required=True, kind=DATE)
    total_value: float | None = _col("valor_total", kind=NUMBER)
    location_id: str | None = _col("local_id")
    xml_file_path: str | None = _col("xml_file_path")
    pdf_file_path: str | None = _col("pdf_file_path")
    qr_code: str | None = _col("qr_code")


@dataclass
class Product(Record):
    collection: ClassVar[str] = schema.PRODUCTS

    id: str | None = _col("id")
    name: str | None = _col("produto", required=True)
    brand: str | None = _col("marca", required=True)
    quantity: float | None = _col("quantidade", kind=NUMBER)
    unit: str | None = _col("unidade", choices=UNITS)
    expiry: str | None = _col("validade", kind=DATE)
    unit_price: float | None = _col("valor", kind=NUMBER)
    minimum_stock: float | None = _col("estoque_minimo", kind=NUMBER)
    location_id: str | None = _col("local_id")
    status: str | None = _col("status", choices=PRODUCT_STATUSES)


@dataclass
class ProductEntry(Record):
    collection: ClassVar[str] = schema.PRODUCT_ENTRIES

    id: str | None = _col("id")
    day: str | None = _col("dia", kind=DATE)
    product_id: str | None = _col("produto_id")
    location_id: str | None = _col("local_id")
    quantity: float | None = _col("quantidade", required=True, kind=NUMBER)
    invoice_id: str | None = _col("invoice_id")
    note: str | None = _col("observacao")


@dataclass
class ProductExit(Record):
    collection: ClassVar[str] = schema.PRODUCT_EXITS

    id: str | None = _col("id")
    day: str | None = _col("dia", kind=DATE)
    product_id: str | None = _col("produto_id")
    location_id: str | None = _col("local_id")
    quantity: float | None = _col("quantidade", required=True, kind=NUMBER)
    reason: str | None = _col("motivo")


@dataclass
class ShoppingListItem(Record):
    collection: ClassVar[str] = schema.SHOPPING_LIST

    id: str | None = _col("id")
    product_name: str | None = _col("produto", required=True)
    quantity: float | None = _col("quantidade", required=True, kind=NUMBER)
    unit: str | None = _col("unidade", choices=UNITS)
    priority: str | None = _col("prioridade", choices=PRIORITIES)
    purchased: bool | None = _col("comprado")


RECORD_TYPES: dict[str, type[Record]] = {
    schema.STORAGE_LOCATIONS: StorageLocation,
    schema.INVOICES: Invoice,
    schema.PRODUCTS: Product,
    schema.PRODUCT_ENTRIES: ProductEntry,
    schema.PRODUCT_EXITS: ProductExit,
    schema.SHOPPING_LIST: ShoppingListItem,
}


def validate_rows(collection: str, rows: list[dict]) -> list[dict]:
    """Run every row through its record type and return normalized rows.

    Raises:
        ValidationError: On the first invalid row, naming its position.
    """
    record_type = RECORD_TYPES[collection]
    result: list[dict] = []
    for idx, row in enumerate(rows, 1):
        try:
            record = record_type.from_row(row)
        except ValidationError as e:
            raise ValidationError(f"linha {idx}: {e}") from e
        result.append(record.to_row())
    return result
