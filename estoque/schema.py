"""Collection registry: names, display labels and export columns."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class Column:
    key: str  # store column name
    label: str  # spreadsheet / PDF header


PRODUCTS = "products"
STORAGE_LOCATIONS = "storage_locations"
INVOICES = "invoices"
PRODUCT_ENTRIES = "product_entries"
PRODUCT_EXITS = "product_exits"
SHOPPING_LIST = "shopping_list"

# Canonical order used for selection and multi-collection exports
COLLECTIONS: tuple[str, ...] = (
    PRODUCTS,
    STORAGE_LOCATIONS,
    INVOICES,
    PRODUCT_ENTRIES,
    PRODUCT_EXITS,
    SHOPPING_LIST,
)

# Backup restore order: referenced collections are written first
RESTORE_ORDER: tuple[str, ...] = (
    STORAGE_LOCATIONS,
    INVOICES,
    PRODUCTS,
    PRODUCT_ENTRIES,
    PRODUCT_EXITS,
    SHOPPING_LIST,
)

_LABELS: dict[str, str] = {
    PRODUCTS: "Produtos",
    STORAGE_LOCATIONS: "Locais de Armazenamento",
    INVOICES: "Notas Fiscais",
    PRODUCT_ENTRIES: "Entradas de Produtos",
    PRODUCT_EXITS: "Saídas de Produtos",
    SHOPPING_LIST: "Lista de Compras",
}

_COLUMNS: dict[str, tuple[Column, ...]] = {
    PRODUCTS: (
        Column("produto", "Produto"),
        Column("marca", "Marca"),
        Column("quantidade", "Quantidade"),
        Column("unidade", "Unidade"),
        Column("validade", "Validade"),
        Column("valor", "Valor"),
        Column("estoque_minimo", "Estoque Mínimo"),
        Column("status", "Status"),
    ),
    STORAGE_LOCATIONS: (
        Column("name", "Nome"),
        Column("description", "Descrição"),
    ),
    INVOICES: (
        Column("numero", "Número"),
        Column("data", "Data"),
        Column("valor_total", "Valor Total"),
    ),
    PRODUCT_ENTRIES: (
        Column("dia", "Data"),
        Column("produto_id", "Produto ID"),
        Column("quantidade", "Quantidade"),
        Column("observacao", "Observação"),
    ),
    PRODUCT_EXITS: (
        Column("dia", "Data"),
        Column("produto_id", "Produto ID"),
        Column("quantidade", "Quantidade"),
        Column("motivo", "Motivo"),
    ),
    SHOPPING_LIST: (
        Column("produto", "Produto"),
        Column("quantidade", "Quantidade"),
        Column("unidade", "Unidade"),
        Column("prioridade", "Prioridade"),
        Column("comprado", "Comprado"),
    ),
}

# Boolean-typed columns, rendered as "Sim"/"Não" in exports
BOOLEAN_COLUMNS: dict[str, frozenset[str]] = {
    SHOPPING_LIST: frozenset({"comprado"}),
}

YES = "Sim"
NO = "Não"


def columns_for(collection: str) -> tuple[Column, ...]:
    """Return the ordered export columns of a collection."""
    return _COLUMNS[collection]


def label_for(collection: str) -> str:
    """Return the display label of a collection."""
    return _LABELS[collection]


def resolve_sheet(sheet_name: str) -> str | None:
    """Map a worksheet title back to a collection name.

    An exact label match wins. Otherwise a label that starts with the sheet
    name is accepted, so titles truncated by the spreadsheet format still
    resolve.
    """
    if not sheet_name:
        return None
    for name, label in _LABELS.items():
        if label == sheet_name:
            return name
    for name, label in _LABELS.items():
        if label.startswith(sheet_name):
            return name
    return None


@dataclass
class Selection:
    """Per-collection on/off flags for exports and restores."""

    flags: dict[str, bool] = field(
        default_factory=lambda: {name: True for name in COLLECTIONS}
    )

    @classmethod
    def of(cls, names: Iterable[str]) -> Selection:
        """Build a selection with exactly the given collections turned on."""
        wanted = set(names)
        unknown = wanted - set(COLLECTIONS)
        if unknown:
            raise KeyError(f"unknown collections: {sorted(unknown)}")
        return cls({name: name in wanted for name in COLLECTIONS})

    @classmethod
    def none(cls) -> Selection:
        return cls({name: False for name in COLLECTIONS})

    def toggle(self, collection: str) -> None:
        label_for(collection)
        self.flags[collection] = not self.flags.get(collection, False)

    def set_all(self, selected: bool) -> None:
        for name in COLLECTIONS:
            self.flags[name] = selected

    def selected(self) -> list[str]:
        """Selected collections in canonical order."""
        return [name for name in COLLECTIONS if self.flags.get(name)]

    def __contains__(self, collection: object) -> bool:
        return bool(self.flags.get(collection))  # type: ignore[arg-type]

    def __bool__(self) -> bool:
        return any(self.flags.get(name) for name in COLLECTIONS)
