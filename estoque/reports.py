"""Report datasets offered as CSV downloads.

Each report reads whole collections from the store and filters, joins and
sorts in memory; the store only needs to support "read all".
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Callable

from . import schema
from .store import DataStore

logger = logging.getLogger(__name__)

MOVEMENTS_LIMIT = 50
EXPIRY_WINDOW_DAYS = 30
LOW_STOCK_STATUSES = ("baixo_estoque", "fora_de_estoque")


def _by_id(rows: list[dict]) -> dict[str, dict]:
    return {r["id"]: r for r in rows if r.get("id") is not None}


def _location_name(locations: dict[str, dict], row: dict) -> str | None:
    location = locations.get(row.get("local_id"))
    return location.get("name") if location else None


def _with_location(rows: list[dict], locations: dict[str, dict]) -> list[dict]:
    return [{**r, "local": _location_name(locations, r)} for r in rows]


def _stock(data: dict[str, list[dict]], today: date) -> list[dict]:
    locations = _by_id(data[schema.STORAGE_LOCATIONS])
    products = sorted(data[schema.PRODUCTS], key=lambda r: str(r.get("produto") or ""))
    return _with_location(products, locations)


def _movements(collection: str) -> Callable[[dict[str, list[dict]], date], list[dict]]:
    def build(data: dict[str, list[dict]], today: date) -> list[dict]:
        locations = _by_id(data[schema.STORAGE_LOCATIONS])
        products = _by_id(data[schema.PRODUCTS])
        rows = sorted(
            data[collection], key=lambda r: str(r.get("dia") or ""), reverse=True
        )[:MOVEMENTS_LIMIT]
        result = []
        for r in rows:
            product = products.get(r.get("produto_id")) or {}
            result.append({
                **r,
                "produto": product.get("produto"),
                "marca": product.get("marca"),
                "local": _location_name(locations, r),
            })
        return result

    return build


def _invoices(data: dict[str, list[dict]], today: date) -> list[dict]:
    locations = _by_id(data[schema.STORAGE_LOCATIONS])
    invoices = sorted(
        data[schema.INVOICES], key=lambda r: str(r.get("data") or ""), reverse=True
    )
    return _with_location(invoices, locations)


def _quantity(row: dict) -> float | None:
    """Numeric quantity, 0 when empty, None when it is not a number."""
    value = row.get("quantidade")
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _expiry(row: dict) -> date | None:
    value = row.get("validade")
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning("Validade ignorada em %s: %r", row.get("id"), value)
        return None


def _low_stock(data: dict[str, list[dict]], today: date) -> list[dict]:
    locations = _by_id(data[schema.STORAGE_LOCATIONS])
    products = [r for r in data[schema.PRODUCTS] if r.get("status") in LOW_STOCK_STATUSES]
    # Quantities that are not numbers sort last
    products.sort(key=lambda r: (_quantity(r) is None, _quantity(r) or 0.0))
    return _with_location(products, locations)


def _expiring(data: dict[str, list[dict]], today: date) -> list[dict]:
    locations = _by_id(data[schema.STORAGE_LOCATIONS])
    limit = today + timedelta(days=EXPIRY_WINDOW_DAYS)
    dated = [(r, _expiry(r)) for r in data[schema.PRODUCTS]]
    dated = [(r, expiry) for r, expiry in dated if expiry is not None and expiry <= limit]
    dated.sort(key=lambda pair: pair[1])
    return [
        {
            **r,
            "local": _location_name(locations, r),
            "dias_para_vencer": (expiry - today).days,
        }
        for r, expiry in dated
    ]


REPORTS: dict[str, tuple[tuple[str, ...], Callable[[dict[str, list[dict]], date], list[dict]]]] = {
    "relatorio_estoque": (
        (schema.PRODUCTS, schema.STORAGE_LOCATIONS), _stock,
    ),
    "relatorio_entradas": (
        (schema.PRODUCT_ENTRIES, schema.PRODUCTS, schema.STORAGE_LOCATIONS),
        _movements(schema.PRODUCT_ENTRIES),
    ),
    "relatorio_saidas": (
        (schema.PRODUCT_EXITS, schema.PRODUCTS, schema.STORAGE_LOCATIONS),
        _movements(schema.PRODUCT_EXITS),
    ),
    "relatorio_notas_fiscais": (
        (schema.INVOICES, schema.STORAGE_LOCATIONS), _invoices,
    ),
    "relatorio_baixo_estoque": (
        (schema.PRODUCTS, schema.STORAGE_LOCATIONS), _low_stock,
    ),
    "relatorio_vencimento": (
        (schema.PRODUCTS, schema.STORAGE_LOCATIONS), _expiring,
    ),
}


async def build_report(
    store: DataStore, name: str, today: date | None = None
) -> list[dict]:
    """Read the collections a report needs and return its rows.

    Raises:
        KeyError: If the report name is unknown.
        StoreError: If a read fails.
    """
    needed, builder = REPORTS[name]
    results = await asyncio.gather(*(store.select_all(c) for c in needed))
    data = dict(zip(needed, results))
    return builder(data, today or date.today())
