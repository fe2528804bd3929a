"""Tests for report datasets."""

import asyncio
from datetime import date

import pytest

from estoque.reports import MOVEMENTS_LIMIT, build_report

TODAY = date(2025, 1, 20)


def _build(store, name):
    return asyncio.run(build_report(store, name, today=TODAY))


def test_stock_report_joins_location(make_store, sample_data):
    rows = _build(make_store(sample_data), "relatorio_estoque")
    assert [r["produto"] for r in rows] == ["Arroz", "Feijão"]
    assert rows[0]["local"] == "Almoxarifado Central"


def test_movements_join_product_and_limit(make_store, sample_data):
    entries = [
        {"id": f"e-{i}", "dia": f"2024-{(i % 12) + 1:02d}-01", "produto_id": "p-1",
         "local_id": "loc-1", "quantidade": 1}
        for i in range(MOVEMENTS_LIMIT + 10)
    ]
    store = make_store(dict(sample_data, product_entries=entries))

    rows = _build(store, "relatorio_entradas")

    assert len(rows) == MOVEMENTS_LIMIT
    assert rows[0]["dia"] >= rows[-1]["dia"]
    assert rows[0]["produto"] == "Arroz"
    assert rows[0]["marca"] == "Marca X"


def test_exits_report(make_store, sample_data):
    rows = _build(make_store(sample_data), "relatorio_saidas")
    assert rows[0]["motivo"] == "Distribuição"
    assert rows[0]["local"] == "Almoxarifado Central"


def test_low_stock_report(make_store, sample_data):
    rows = _build(make_store(sample_data), "relatorio_baixo_estoque")
    assert [r["id"] for r in rows] == ["p-2"]


def test_expiring_report_counts_days(make_store, sample_data):
    rows = _build(make_store(sample_data), "relatorio_vencimento")
    # p-2 has no expiry date and is left out
    assert [r["id"] for r in rows] == ["p-1"]
    assert rows[0]["dias_para_vencer"] == 12


def test_invoices_report(make_store, sample_data):
    rows = _build(make_store(sample_data), "relatorio_notas_fiscais")
    assert rows[0]["numero"] == "NF-001"
    assert rows[0]["local"] == "Almoxarifado Central"


def test_unknown_report(make_store):
    with pytest.raises(KeyError):
        _build(make_store(), "relatorio_x")


def test_rows_with_unparseable_values_do_not_break_reports(make_store, sample_data):
    products = sample_data["products"] + [
        {"id": "p-3", "produto": "Açúcar", "marca": "Z", "quantidade": "muito",
         "validade": "01/01/2030", "local_id": "loc-1", "status": "fora_de_estoque"},
    ]
    store = make_store(dict(sample_data, products=products))

    expiring = _build(store, "relatorio_vencimento")
    assert [r["id"] for r in expiring] == ["p-1"]

    low = _build(store, "relatorio_baixo_estoque")
    assert [r["id"] for r in low] == ["p-2", "p-3"]
